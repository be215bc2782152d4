"""Configuration commands for the master portal CLI."""

from cyclopts import App

from master_portal.config import SETTINGS, PortalSettings, get_config, setting_default

config_app = App(name="config", help="Manage portal connection and display settings")


def _scope(global_: bool) -> str:
    return "global" if global_ else "local"


@config_app.command
def set(key: str, value: str, global_: bool = False) -> None:
    """Set a configuration setting.

    Portal settings are checked before saving; a rejected value exits
    with status 1 and leaves the config file untouched.

    Args:
        key: Configuration key, e.g. api.base_url or portal.page_size
        value: Configuration value
        global_: If True, set in global config. If False, set in local config.
    """
    config = get_config(use_global=global_)
    try:
        stored = config.set(key, value)
    except ValueError as e:
        print(f"Error: {e}")
        raise SystemExit(1) from None
    print(f"Set {key} = {stored} ({_scope(global_)})")


@config_app.command
def unset(key: str, global_: bool = False) -> None:
    """Unset a configuration setting.

    Args:
        key: Configuration key to remove
        global_: If True, remove from global config. If False, from local config.
    """
    config = get_config(use_global=global_)
    if not config.unset(key):
        print(f"{key} is not set in {_scope(global_)} config")
        return
    default = setting_default(key)
    suffix = f"; using default {default}" if default is not None else ""
    print(f"Unset {key} ({_scope(global_)}){suffix}")


@config_app.command
def get(key: str, global_: bool = False) -> None:
    """Show the effective value of a setting and where it comes from.

    Args:
        key: Configuration key
        global_: If True, read global config only
    """
    config = get_config(use_global=global_)
    source = config.source(key)
    if source is None:
        print(f"{key} is not set")
        return
    print(f"{key} = {config.get(key, setting_default(key))} ({source})")


@config_app.command(name="list")
def list_config(global_: bool = False) -> None:
    """List every portal setting with its effective value, then any other keys.

    Args:
        global_: If True, list global config only
    """
    config = get_config(use_global=global_)
    print(f"{'Global' if global_ else 'Effective'} settings:\n")
    for key in SETTINGS:
        source = config.source(key)
        value = config.get(key, setting_default(key)) if source else "(not set)"
        print(f"{key} = {value}" + (f" ({source})" if source else ""))

    extra = {key: value for key, value in config.list().items() if key not in SETTINGS}
    if extra:
        print("\nOther keys:\n")
        for key, value in extra.items():
            print(f"{key} = {value}")


@config_app.command
def check() -> None:
    """Check that the merged configuration is usable by entity commands."""
    try:
        settings = PortalSettings.from_config(get_config())
    except ValueError as e:
        print(f"Error: {e}")
        raise SystemExit(1) from None
    print(f"Configuration OK: {settings.base_url} ({settings.page_size} per page, timeout {settings.timeout}s)")
