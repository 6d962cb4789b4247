"""Utility helpers shared by the ssg_pages configuration loader."""

from __future__ import annotations

import collections.abc as cabc
import importlib
import typing as typ
from pathlib import Path

from ssg_pages.markup.critical import PRELOAD_CHOICES, CriticalCssOptions
from ssg_pages.markup.formatting import FORMATTING_CHOICES
from ssg_pages.render.server_module import OUTPUT_FORMATS

from .models import SCRIPT_CHOICES, BuildOptions, ConfigurationError, EntrySpec

# Keys accepted in ``ssg_options`` and their camelCase spellings.
OPTION_ALIASES: dict[str, str] = {
    "rootContainerId": "root_container_id",
    "templateFile": "template_file",
    "entrys": "entries",
    "beastiesOptions": "critical_css",
    "criticalCss": "critical_css",
    "copyFilter": "copy_filter",
    "themeDir": "theme_dir",
    "onBeforePageRender": "on_before_page_render",
    "onPageRendered": "on_page_rendered",
    "onFinished": "on_finished",
}
HOOK_KEYS = ("on_before_page_render", "on_page_rendered", "on_finished")


def _normalize_keys(options: cabc.Mapping[str, typ.Any]) -> dict[str, typ.Any]:
    """Map camelCase aliases onto their snake_case option names."""
    return {OPTION_ALIASES.get(key, key): value for key, value in options.items()}


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _choice(key: str, value: object, choices: tuple[str, ...]) -> str:
    if value not in choices:
        allowed = ", ".join(repr(choice) for choice in choices)
        msg = f"Invalid value {value!r} for '{key}'; expected one of {allowed}."
        raise ConfigurationError(msg)
    return typ.cast("str", value)


def merge_options(
    host_options: cabc.Mapping[str, typ.Any] | None,
    overrides: cabc.Mapping[str, typ.Any] | None,
) -> dict[str, typ.Any]:
    """Merge caller overrides over host ``ssg_options``.

    Override values of ``None`` never replace a host value, so unset CLI flags
    fall through to the configuration file.
    """
    merged = _normalize_keys(host_options or {})
    for key, value in _normalize_keys(overrides or {}).items():
        if value is not None:
            merged[key] = value
    return merged


def resolve_hook(key: str, value: object) -> cabc.Callable[..., typ.Any] | None:
    """Return a callable hook from a callable or a ``"module:attribute"`` string."""
    if value is None or callable(value):
        return value
    if not isinstance(value, str) or ":" not in value:
        msg = f"Hook '{key}' must be callable or a 'module:attribute' string."
        raise ConfigurationError(msg)
    module_name, _, attribute = value.partition(":")
    try:
        target: typ.Any = importlib.import_module(module_name)
        for part in attribute.split("."):
            target = getattr(target, part)
    except (ImportError, AttributeError) as exc:
        msg = f"Cannot import hook '{key}' from {value!r}: {exc}"
        raise ConfigurationError(msg) from exc
    if not callable(target):
        msg = f"Hook '{key}' ({value!r}) is not callable."
        raise ConfigurationError(msg)
    return target


def _build_entry(payload: object, index: int) -> EntrySpec:
    """Build an EntrySpec from a mapping in the ``entries`` list."""
    if not isinstance(payload, cabc.Mapping):
        msg = f"Entry #{index} must be a mapping."
        raise ConfigurationError(msg)
    data = _normalize_keys(payload)
    name = _optional_str(data.get("name"))
    if not name:
        msg = f"Entry #{index} is missing 'name'."
        raise ConfigurationError(msg)
    defaults = EntrySpec(name=name)
    return EntrySpec(
        name=name,
        template=_optional_str(data.get("template")) or defaults.template,
        entry=_optional_str(data.get("entry")) or defaults.entry,
        template_file=_optional_str(data.get("template_file")),
    )


def _build_critical_css(value: object, base: str | None) -> CriticalCssOptions | None:
    """Build critical-CSS options; ``False``/``None`` disables the pass."""
    match value:
        case None | False:
            return None
        case True:
            return CriticalCssOptions(base=base or "/")
        case CriticalCssOptions():
            return value
        case cabc.Mapping():
            preload = _choice(
                "critical_css.preload", value.get("preload", "media"), PRELOAD_CHOICES
            )
            limit = value.get("max_inline_bytes")
            return CriticalCssOptions(
                preload=typ.cast("typ.Any", preload),
                max_inline_bytes=int(limit) if limit is not None else None,
                base=base or "/",
            )
        case _:
            msg = "'critical_css' must be a boolean or a mapping."
            raise ConfigurationError(msg)


def _string_tuple(key: str, value: object) -> tuple[str, ...]:
    match value:
        case None:
            return ()
        case str():
            return (value,)
        case cabc.Iterable():
            return tuple(str(item) for item in value)
        case _:
            msg = f"'{key}' must be a string or a list of strings."
            raise ConfigurationError(msg)


def build_options(options: cabc.Mapping[str, typ.Any]) -> BuildOptions:
    """Validate merged option values and freeze them into ``BuildOptions``.

    Raises
    ------
    ConfigurationError
        If a value is outside its allowed choices or has the wrong shape.
    """
    data = _normalize_keys(options)
    known = {field for field in BuildOptions.__dataclass_fields__}
    unknown = sorted(set(data) - known)
    if unknown:
        msg = f"Unknown ssg option(s): {', '.join(unknown)}."
        raise ConfigurationError(msg)

    defaults = BuildOptions()
    base = _optional_str(data.get("base"))
    entries_raw = data.get("entries") or []
    if not isinstance(entries_raw, cabc.Sequence) or isinstance(entries_raw, str):
        msg = "'entries' must be a list of mappings."
        raise ConfigurationError(msg)
    theme_dir = data.get("theme_dir")

    return BuildOptions(
        script=typ.cast(
            "typ.Any", _choice("script", data.get("script", defaults.script), SCRIPT_CHOICES)
        ),
        mock=bool(data.get("mock", defaults.mock)),
        formatting=typ.cast(
            "typ.Any",
            _choice(
                "formatting",
                data.get("formatting", defaults.formatting),
                FORMATTING_CHOICES,
            ),
        ),
        format=typ.cast(
            "typ.Any", _choice("format", data.get("format", defaults.format), OUTPUT_FORMATS)
        ),
        root_container_id=_optional_str(data.get("root_container_id"))
        or defaults.root_container_id,
        mode=_optional_str(data.get("mode")),
        base=base,
        entry=_optional_str(data.get("entry")),
        template=_optional_str(data.get("template")) or defaults.template,
        template_file=_optional_str(data.get("template_file")),
        entries=tuple(
            _build_entry(payload, index) for index, payload in enumerate(entries_raw)
        ),
        critical_css=_build_critical_css(data.get("critical_css"), base),
        copy_filter=_string_tuple("copy_filter", data.get("copy_filter")),
        theme_dir=Path(theme_dir) if theme_dir else None,
        **{key: resolve_hook(key, data.get(key)) for key in HOOK_KEYS},
    )


__all__ = [
    "HOOK_KEYS",
    "OPTION_ALIASES",
    "build_options",
    "merge_options",
    "resolve_hook",
]
