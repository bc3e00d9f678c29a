import os, logging

_debug = bool(int(os.getenv("SI_SERIES_DEBUG", "0")))
_level = logging.DEBUG if _debug else logging.INFO

_root = logging.getLogger("si_series")
_root.setLevel(_level)
_root.propagate = False

_h = logging.StreamHandler()
_h.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
_root.addHandler(_h)

_extra_handlers: list[logging.Handler] = []


def attach(handler: logging.Handler):
    """Attach a global handler (e.g. a test capture handler)."""
    _extra_handlers.append(handler)
    for name, logger in _package_loggers():
        logger.addHandler(handler)


def detach(handler: logging.Handler):
    """Remove a handler previously added with `attach`."""
    if handler in _extra_handlers:
        _extra_handlers.remove(handler)
    for name, logger in _package_loggers():
        if handler in logger.handlers:
            logger.removeHandler(handler)


def get(subname: str | None = None) -> logging.Logger:
    name = "si_series" if subname is None else f"si_series.{subname}"
    logger = logging.getLogger(name)
    logger.setLevel(_level)
    logger.propagate = False
    for h in (_h, *_extra_handlers):
        if h not in logger.handlers:
            logger.addHandler(h)
    return logger


def enable(*subs):
    for s in subs:
        get(s).disabled = False


def disable(*subs):
    for s in subs:
        get(s).disabled = True


def _package_loggers():
    for name, logger in list(logging.Logger.manager.loggerDict.items()):
        if isinstance(logger, logging.Logger) and (
            name == "si_series" or name.startswith("si_series.")
        ):
            yield name, logger


def get_package_loggers():
    return [name for name, _ in _package_loggers() if name != "si_series"]
