"""Repository lookups that raise the aftersales error types."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from aftersales.errors import Conflict, NotFound


def load(aggregate_cls, identifier, field: str, expected_version: int | None = None):
    """Fetch ``aggregate_cls`` by id.

    Raises NotFound naming ``field`` when the record is missing, and Conflict
    when ``expected_version`` is given and the stored version has moved on.
    """
    try:
        aggregate = current_domain.repository_for(aggregate_cls).get(identifier)
    except ObjectNotFoundError as exc:
        raise NotFound({field: [f"{aggregate_cls.__name__} {identifier} does not exist"]}) from exc

    if expected_version is not None and aggregate._version != expected_version:
        raise Conflict(
            {"expected_version": [f"{aggregate_cls.__name__} {identifier} is at version {aggregate._version}"]}
        )
    return aggregate
