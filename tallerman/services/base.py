"""
Row lookup helpers shared by the services.
"""

from tallerman.exceptions import NotFound


def resolve(model, ref):
    """Return ref when it is already an instance, else fetch it by pk."""
    if isinstance(ref, model):
        return ref
    try:
        return model.objects.get(pk=ref)
    except model.DoesNotExist:
        raise NotFound(model.__name__, ref) from None


def lock(model, ref):
    """
    Fetch a fresh copy of the row under select_for_update().

    Must run inside transaction.atomic(). The lock on a parent row (product,
    service, vehicle, evaluation) is what serializes mutations per resource.
    """
    pk = getattr(ref, 'pk', ref)
    try:
        return model.objects.select_for_update().get(pk=pk)
    except model.DoesNotExist:
        raise NotFound(model.__name__, pk) from None
