"""Load a mitigation catalog from an import path.

The catalog itself lives outside this package.  It is named as
``"package.module:attribute"`` where the attribute is either an iterable
of :class:`Mitigation` objects or a zero-argument callable returning one.
"""

from __future__ import annotations

import importlib
import logging

from mitigation_policy.core.errors import CatalogLoadError, MitigationError

from .mitigation import Mitigation
from .register import MitigationRegister

logger = logging.getLogger(__name__)


def load_catalog(target: str) -> MitigationRegister:
    """Import ``module:attr`` and build a register from it.

    Raises:
        CatalogLoadError: The module or attribute cannot be found, the
            catalog callable raises, or it does not yield
            :class:`Mitigation` objects.
    """
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise CatalogLoadError(
            f"Catalog must be given as 'module:attribute', got {target!r}"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise CatalogLoadError(f"Cannot import catalog module {module_name!r}: {exc}") from exc
    try:
        obj = getattr(module, attr)
    except AttributeError:
        raise CatalogLoadError(f"Module {module_name!r} has no attribute {attr!r}") from None

    if callable(obj):
        try:
            obj = obj()
        except MitigationError:
            raise
        except Exception as exc:
            raise CatalogLoadError(
                f"Catalog {target!r} raised while building: "
                f"{type(exc).__name__}: {exc}"
            ) from exc
    if isinstance(obj, MitigationRegister):
        return obj
    try:
        items = list(obj)
    except TypeError:
        raise CatalogLoadError(
            f"Catalog {target!r} is not an iterable of mitigations"
        ) from None

    bad = [item for item in items if not isinstance(item, Mitigation)]
    if bad:
        raise CatalogLoadError(
            f"Catalog {target!r} contains non-mitigation entries: {bad[:3]!r}"
        )
    logger.debug("Loaded catalog %s with %d mitigations", target, len(items))
    return MitigationRegister(items)
