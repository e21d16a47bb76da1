"""
CLI интерфейс для component_inventory.

Примеры использования:
    # Каноническая запись сервера из снимка (без FleetDB)
    python -m component_inventory convert snapshot.json --server-id a1b2 --facility sandbox

    # Сверка снимка с сохранённой в FleetDB записью
    python -m component_inventory diff snapshot.json --server-id a1b2 --facility sandbox

    # Синхронизация с FleetDB (без записи)
    python -m component_inventory sync snapshot.json --server-id a1b2 --facility sandbox --dry-run
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .core.exceptions import ComponentInventoryError, format_error_for_log

# Логгер будет настроен в main() после загрузки конфига
logger = logging.getLogger(__name__)


def setup_parser() -> argparse.ArgumentParser:
    """
    Создаёт парсер аргументов командной строки.

    Returns:
        ArgumentParser: Настроенный парсер
    """
    parser = argparse.ArgumentParser(
        prog="component_inventory",
        description="Нормализация и сверка инвентаризации серверов с FleetDB",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры:
  %(prog)s convert snapshot.json --server-id a1b2 --facility sandbox
  %(prog)s diff snapshot.json --server-id a1b2 --facility sandbox
  %(prog)s sync snapshot.json --server-id a1b2 --facility sandbox --dry-run
        """,
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Подробный вывод (DEBUG)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Путь к файлу конфигурации YAML (default: config.yaml)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Команды")

    for name, help_text in (
        ("convert", "Построить каноническую запись сервера"),
        ("diff", "Сверить снимок с записью в FleetDB"),
        ("sync", "Синхронизировать инвентаризацию с FleetDB"),
    ):
        cmd = subparsers.add_parser(name, help=help_text)
        cmd.add_argument("snapshot", help="JSON файл снимка инвентаризации")
        cmd.add_argument("--server-id", required=True, help="ID сервера в FleetDB")
        cmd.add_argument("--facility", default="", help="Код площадки")
        cmd.add_argument("--bios-config", default=None, help="JSON файл настроек BIOS")
        if name != "convert":
            cmd.add_argument("--fleetdb-url", help="URL FleetDB (переопределяет config.yaml)")
            cmd.add_argument("--fleetdb-token", help="Токен FleetDB (переопределяет config.yaml)")
        if name == "sync":
            cmd.add_argument(
                "--dry-run",
                action="store_true",
                help="Режим симуляции (ничего не пишет в FleetDB)",
            )

    return parser


def _load_json(path: str) -> Dict[str, Any]:
    """Читает JSON файл."""
    with open(Path(path), "r", encoding="utf-8") as f:
        return json.load(f)


def _setup_logging(app_config: Any, verbose: bool) -> None:
    """Настройка логирования из config.yaml (-v переопределяет уровень)."""
    from .core.logging import LogConfig, setup_logging_from_config

    log_data = app_config.logging.model_dump()
    if verbose:
        log_data["level"] = "DEBUG"
    setup_logging_from_config(LogConfig.from_dict(log_data))


def _make_client(args: argparse.Namespace, app_config: Any):
    from .fleetdb import FleetDBClient

    fleetdb_cfg = app_config.fleetdb
    return FleetDBClient(
        url=getattr(args, "fleetdb_url", None) or fleetdb_cfg.url,
        token=getattr(args, "fleetdb_token", None) or fleetdb_cfg.token,
        verify_ssl=fleetdb_cfg.verify_ssl,
        timeout=fleetdb_cfg.timeout,
        app_kind=app_config.inventory.app_kind,
        max_retries=fleetdb_cfg.max_retries,
        retry_delay=fleetdb_cfg.retry_delay,
    )


def _make_converter(app_config: Any, client: Optional[Any] = None):
    """Справочник типов: из FleetDB (load_component_types) или из конфига."""
    from .core.domain import InventoryConverter

    if client is not None and app_config.inventory.load_component_types:
        return InventoryConverter.from_component_types(client.get_component_types())
    return InventoryConverter(app_config.inventory.component_slugs)


def cmd_convert(args: argparse.Namespace, app_config: Any) -> int:
    """Команда convert: печатает ServerRecord в JSON."""
    device = _load_json(args.snapshot)
    bios_config = _load_json(args.bios_config) if args.bios_config else None

    converter = _make_converter(app_config)
    record = converter.to_server_record(args.server_id, args.facility, device, bios_config)
    output = record.to_dict()
    output["vendor_attributes"] = converter.vendor_attributes(device)
    output["metadata"] = converter.metadata(device)

    print(json.dumps(output, ensure_ascii=False, indent=2))
    return 0


def cmd_diff(args: argparse.Namespace, app_config: Any) -> int:
    """Команда diff: сверка с сохранённой записью."""
    device = _load_json(args.snapshot)
    client = _make_client(args, app_config)
    converter = _make_converter(app_config, client)

    observed = converter.to_server_record(args.server_id, args.facility, device)
    stored = client.get_server_record(args.server_id)
    if stored is None:
        print(f"{args.server_id}: сервер не найден в FleetDB")
        return 0

    report = converter.compare(stored, observed)
    print(report.format_detailed())
    return 1 if report.has_findings else 0


def cmd_sync(args: argparse.Namespace, app_config: Any) -> int:
    """Команда sync: полный проход синхронизации."""
    from .fleetdb import InventorySync

    device = _load_json(args.snapshot)
    bios_config = _load_json(args.bios_config) if args.bios_config else None

    client = _make_client(args, app_config)
    sync = InventorySync(
        client,
        _make_converter(app_config, client),
        app_kind=app_config.inventory.app_kind,
        dry_run=args.dry_run or app_config.inventory.dry_run,
        bios_config_ns=app_config.fleetdb.bios_config_ns,
    )
    stats = sync.sync_inventory(args.server_id, args.facility, device, bios_config)

    print(json.dumps(stats, ensure_ascii=False, indent=2))
    return 1 if stats.get("failed") else 0


COMMANDS = {
    "convert": cmd_convert,
    "diff": cmd_diff,
    "sync": cmd_sync,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Главная функция CLI."""
    from .config import load_config

    parser = setup_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        app_config = load_config(args.config).validate()
    except ComponentInventoryError as e:
        print(f"Ошибка конфигурации: {e}", file=sys.stderr)
        return 2

    _setup_logging(app_config, args.verbose)
    logger.info(f"Run started (command={args.command})")

    try:
        return COMMANDS[args.command](args, app_config)
    except ComponentInventoryError as e:
        logger.error(format_error_for_log(e))
        return 1
    except (OSError, ValueError) as e:
        logger.error(f"Ошибка чтения входных данных: {e}")
        return 1
