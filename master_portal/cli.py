"""CLI for the master portal."""

import asyncio
import inspect
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Annotated, Literal

import structlog
from cyclopts import App, Parameter

from master_portal.backends import RestBackend, create_client
from master_portal.config import PortalSettings, get_config
from master_portal.config_commands import config_app
from master_portal.manager import EntityManager
from master_portal.models import Entity
from master_portal.notifications import Notification, NotificationKind, Notifier
from master_portal.resources import ENTITY_SPECS, EntitySpec

logger = structlog.get_logger()

app = App(
    help="Master Portal - manage reference data through the portal REST API",
)

app.command(config_app)


def configure_logging(log_level: str) -> None:
    """Configure structlog with the specified log level."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(min_level=log_level.lower()))


def print_notification(notification: Notification) -> None:
    if notification.visible:
        marker = "✓" if notification.kind is NotificationKind.SUCCESS else "✗"
        print(f"{marker} {notification.message}")


@asynccontextmanager
async def open_manager(spec: EntitySpec) -> AsyncIterator[EntityManager]:
    """Build a manager for one entity type from the configured settings."""
    try:
        settings = PortalSettings.from_config(get_config())
    except ValueError as e:
        print(f"Error: {e}")
        raise SystemExit(1) from None
    async with create_client(settings.base_url, settings.timeout) as client:
        notifier = Notifier(success_delay=settings.success_delay, error_delay=settings.error_delay)
        notifier.subscribe(print_notification)
        yield EntityManager(
            spec,
            RestBackend(spec, client),
            notifier,
            page_size=settings.page_size,
            discard_stale_loads=settings.discard_stale_loads,
        )


def field_options(model: type[Entity], include_id: bool = True) -> list[inspect.Parameter]:
    """One optional ``--field-name`` text option per entity field."""
    return [
        inspect.Parameter(name, inspect.Parameter.KEYWORD_ONLY, default=None, annotation=str | None)
        for name in model.field_names(include_id)
    ]


def with_signature(func: Callable[..., None], parameters: list[inspect.Parameter]) -> Callable[..., None]:
    """Expose ``parameters`` as the signature of a ``**values`` command."""
    func.__signature__ = inspect.Signature(parameters, return_annotation=None)
    func.__annotations__ = {p.name: p.annotation for p in parameters} | {"return": None}
    return func


def given_fields(values: dict[str, str | None]) -> dict[str, str]:
    """Keep only the field options present on the command line."""
    return {name: value for name, value in values.items() if value is not None}


def print_table(manager: EntityManager) -> None:
    columns = manager.spec.model.field_names()
    rows = [[str(getattr(item, c) if getattr(item, c) is not None else "") for c in columns] for item in manager.items]
    widths = [max([len(c)] + [len(r[i]) for r in rows]) for i, c in enumerate(columns)]
    print("  ".join(c.ljust(w) for c, w in zip(columns, widths)))
    for row in rows:
        print("  ".join(v.ljust(w) for v, w in zip(row, widths)))

    pagination = manager.pagination
    if pagination.total_pages > 1:
        window = " ".join(
            f"[{n}]" if n == pagination.current_page else str(n) for n in manager.page_window
        )
        print(f"\nPage {pagination.current_page} of {pagination.total_pages} ({pagination.total_items} items)  {window}")


def exit_on_error(manager: EntityManager) -> None:
    notification = manager.notification
    if notification.visible and notification.kind is NotificationKind.ERROR:
        raise SystemExit(1)


def confirm_prompt(question: str) -> bool:
    return input(f"{question} [y/N] ").strip().lower() in ("y", "yes")


def build_entity_app(spec: EntitySpec) -> App:
    """Create the list/get/add/edit/delete commands for one entity type."""
    entity_app = App(name=spec.name, help=f"Manage {spec.label} records")

    async def _list(page: int | None) -> None:
        async with open_manager(spec) as manager:
            await manager.load(page)
            print_table(manager)
            exit_on_error(manager)

    async def _get(entity_id: int) -> None:
        async with open_manager(spec) as manager:
            entity = await manager.search(entity_id)
            if entity is not None:
                print_table(manager)
            exit_on_error(manager)

    async def _add(values: dict[str, str]) -> None:
        async with open_manager(spec) as manager:
            manager.open_add()
            manager.update_draft(**values)
            if not await manager.save():
                raise SystemExit(1)
            print_table(manager)

    async def _edit(entity_id: int, values: dict[str, str]) -> None:
        async with open_manager(spec) as manager:
            entity = await manager.search(entity_id)
            if entity is None:
                raise SystemExit(1)
            manager.open_edit(entity)
            manager.update_draft(**values)
            if not await manager.save():
                raise SystemExit(1)
            print_table(manager)

    async def _delete(entity_id: int, yes: bool) -> None:
        async with open_manager(spec) as manager:
            confirm = (lambda _question: True) if yes else confirm_prompt
            deleted = await manager.remove(entity_id, confirm)
            if deleted:
                print_table(manager)
            exit_on_error(manager)

    @entity_app.command(name="list")
    def list_entities(page: int | None = None) -> None:
        """List records, one page at a time for paged resources."""
        asyncio.run(_list(page))

    @entity_app.command
    def get(entity_id: int) -> None:
        """Show a single record by ID."""
        asyncio.run(_get(entity_id))

    def add(**values: str | None) -> None:
        """Add a record; pass each field as --field-name value."""
        asyncio.run(_add(given_fields(values)))

    def edit(entity_id: int, **values: str | None) -> None:
        """Edit a record, changing only the given --field-name options."""
        asyncio.run(_edit(entity_id, given_fields(values)))

    entity_app.command(with_signature(add, field_options(spec.model)))
    entity_app.command(
        with_signature(
            edit,
            [inspect.Parameter("entity_id", inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=int)]
            + field_options(spec.model, include_id=False),
        )
    )

    @entity_app.command
    def delete(entity_id: int, yes: bool = False) -> None:
        """Delete a record after confirmation."""
        asyncio.run(_delete(entity_id, yes))

    return entity_app


for _spec in ENTITY_SPECS.values():
    app.command(build_entity_app(_spec))


@app.meta.default
def main(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "critical",
) -> None:
    """Main entry point with global options."""
    configure_logging(log_level)
    app(tokens)


def run() -> None:
    """Console script entry point."""
    app.meta()


if __name__ == "__main__":
    run()
