from pathlib import Path

from sqlalchemy.engine import make_url


def resolve_sqlite_url(url: str, project_root: Path) -> str:
    """Anchor a relative SQLite database path at ``project_root``.

    ``sqlite:///./dev.db`` and ``sqlite:///dev.db`` both become absolute
    ``sqlite:////<root>/dev.db`` URLs. In-memory databases, absolute paths
    and other backends are returned unchanged.
    """
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return url
    database = parsed.database
    if not database or database == ":memory:" or Path(database).is_absolute():
        return url
    absolute = (project_root / database).resolve()
    return parsed.set(database=str(absolute)).render_as_string(hide_password=False)


def redact_url(url: str) -> str:
    """Return ``url`` with any password masked, for log output."""
    return make_url(url).render_as_string(hide_password=True)
