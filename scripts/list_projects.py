"""Утилита для получения колонок Asana и проектов YouTrack."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Iterable, Tuple

from asana_youtrack_sync.clients import AsanaClient, YouTrackClient
from asana_youtrack_sync.config import AppConfig


def _format_table(title: str, rows: Iterable[Tuple[str, str]]) -> str:
    rows = list(rows)
    if not rows:
        return f"{title}: нет данных"
    id_width = max(len(r[0]) for r in rows)
    name_width = max(len(r[1]) for r in rows)
    header = (
        f"{title}:\n"
        f"  {'ID'.ljust(id_width)}  |  {'Name'.ljust(name_width)}\n"
        f"  {'-' * id_width}--+-{'-' * name_width}"
    )
    body = "\n".join(f"  {item_id.ljust(id_width)}  |  {name}" for item_id, name in rows)
    return f"{header}\n{body}"


def collect_asana_sections(client: AsanaClient) -> list[Tuple[str, str]]:
    return [(str(item.get("gid") or ""), str(item.get("name") or "")) for item in client.list_sections()]


def collect_youtrack_projects(client: YouTrackClient) -> list[Tuple[str, str]]:
    projects = []
    for item in client.list_projects():
        short_name = str(item.get("shortName") or item.get("id") or "")
        projects.append((short_name, str(item.get("name") or "")))
    return projects


def main() -> None:
    parser = argparse.ArgumentParser(description="Выводит колонки проекта Asana и/или проекты YouTrack")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="Путь к YAML конфигурации",
    )
    parser.add_argument(
        "--source",
        choices=["asana", "youtrack", "both"],
        default="both",
        help="Что вывести",
    )
    args = parser.parse_args()

    config = AppConfig.load(args.config)

    outputs: list[str] = []
    if args.source in ("asana", "both"):
        asana_client = AsanaClient(config.asana)
        outputs.append(_format_table("Asana sections", collect_asana_sections(asana_client)))

    if args.source in ("youtrack", "both"):
        youtrack_client = YouTrackClient(config.youtrack)
        outputs.append(_format_table("YouTrack projects (ID = shortName)", collect_youtrack_projects(youtrack_client)))

    print("\n\n".join(outputs))


if __name__ == "__main__":
    main()
