"""Append-only model base: rows are inserted once and never changed."""

from django.db import models

from pointsman.exceptions import LedgerImmutableError


class AppendOnlyQuerySet(models.QuerySet):
    """QuerySet that refuses bulk mutation."""

    def update(self, **kwargs):
        raise LedgerImmutableError(model=self.model.__name__)

    def delete(self):
        raise LedgerImmutableError(model=self.model.__name__)


class AppendOnlyModel(models.Model):
    """
    Abstract base for immutable rows.

    save() only inserts; delete() always raises. Corrections are new rows.
    """

    objects = AppendOnlyQuerySet.as_manager()

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise LedgerImmutableError(model=type(self).__name__, pk=self.pk)
        kwargs["force_insert"] = True
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise LedgerImmutableError(model=type(self).__name__, pk=self.pk)
