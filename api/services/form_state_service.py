"""Form state store for one certificate preview page.

The store is the single source of truth for field values. Updates arrive
as partial mappings (one htmx ``change`` event, or an avatar encode
completing) and are shallow-merged into a new frozen snapshot:

- keys that are not certificate fields are dropped before merging
- supplied keys replace their previous value (last writer wins)
- every other key keeps its previous value untouched

No range validation happens here. Required fields and declared ranges are
checked by the form itself on submit.
"""

import logging
from collections.abc import Mapping

from pydantic import TypeAdapter, ValidationError

from schemas import DOMAIN_FIELDS, INTEGER_FIELDS, FormState

logger = logging.getLogger(__name__)

_int_adapter = TypeAdapter(int)


class FormStateStore:
    """Holds the current ``FormState`` and applies partial updates."""

    def __init__(self, initial: FormState | None = None) -> None:
        self._state = initial or FormState()

    def snapshot(self) -> FormState:
        return self._state

    def merge(self, update: Mapping[str, object]) -> FormState:
        """Shallow-merge ``update`` into the current snapshot and return it."""
        changes = {key: value for key, value in update.items() if key in DOMAIN_FIELDS}
        ignored = sorted(key for key in update if key not in DOMAIN_FIELDS)
        if ignored:
            logger.debug("form_state.merge.ignored_keys", extra={"keys": ignored})

        if changes:
            self._state = self._state.model_copy(update=changes)
        return self._state


def coerce_form_values(raw: Mapping[str, object]) -> dict[str, object]:
    """Convert raw HTML form strings into certificate field values.

    Blank values become ``None`` (unset). Integer fields are parsed; a value
    that does not parse is left out of the result so the previous value
    survives. Unknown keys pass through untouched; ``FormStateStore.merge``
    filters them.
    """
    values: dict[str, object] = {}
    for key, value in raw.items():
        if isinstance(value, str):
            value = value.strip()
            if value == "":
                values[key] = None
                continue

        if key in INTEGER_FIELDS and value is not None:
            try:
                values[key] = _int_adapter.validate_python(value)
            except ValidationError:
                logger.info(
                    "form_state.coerce.invalid_integer",
                    extra={"field": key, "value": str(value)[:32]},
                )
            continue

        values[key] = value
    return values
