"""Pointsman admin."""

from django.contrib import admin
from django.db.models import BigIntegerField, Sum, Value
from django.db.models.functions import Coalesce
from django.utils.html import format_html

from pointsman.models import Client, PointsTransaction, RewardIssuance
from pointsman.tiers import get_tier_table, resolve_tier

TIER_COLORS = {
    "bronze": "#a07040",
    "silver": "#c0c0c0",
    "gold": "#ffd700",
    "platinum": "#e5e4e2",
}


class ReadOnlyAdminMixin:
    """Ledger rows are append-only; the admin never edits them."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class PointsTransactionInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = PointsTransaction
    extra = 0
    fields = ["created_at", "kind", "delta", "description", "source_booking_ref", "created_by"]
    readonly_fields = fields
    ordering = ["-created_at", "-id"]


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ["code", "display_name", "balance_display", "tier_badge", "is_active", "enrolled_at"]
    list_filter = ["is_active"]
    search_fields = ["code", "display_name"]
    readonly_fields = ["uuid", "enrolled_at", "updated_at"]
    inlines = [PointsTransactionInline]

    def get_queryset(self, request):
        return (
            super()
            .get_queryset(request)
            .annotate(
                _balance=Coalesce(
                    Sum("points_transactions__delta"),
                    Value(0),
                    output_field=BigIntegerField(),
                )
            )
        )

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description="Points", ordering="_balance")
    def balance_display(self, obj):
        return obj._balance

    @admin.display(description="Tier")
    def tier_badge(self, obj):
        status = resolve_tier(int(obj._balance), get_tier_table())
        color = TIER_COLORS.get(status.tier.name, "#6c757d")
        text_color = "#000" if status.tier.name in ("gold", "silver", "platinum") else "#fff"
        return format_html(
            '<span style="background:{}; color:{}; padding:2px 8px; '
            'border-radius:3px; font-size:11px;">{}</span>',
            color,
            text_color,
            str(status.tier),
        )


@admin.register(PointsTransaction)
class PointsTransactionAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ["created_at", "client_code", "kind", "points_display", "description"]
    list_filter = ["kind"]
    search_fields = ["client__code", "description", "source_booking_ref"]
    date_hierarchy = "created_at"

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("client")

    @admin.display(description="Client")
    def client_code(self, obj):
        return obj.client.code

    @admin.display(description="Points")
    def points_display(self, obj):
        if obj.delta > 0:
            return format_html('<span style="color:green">+{}</span>', obj.delta)
        return format_html('<span style="color:red">{}</span>', obj.delta)


@admin.register(RewardIssuance)
class RewardIssuanceAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ["created_at", "client", "reward_kind", "detail", "points", "tier_before", "tier_after", "created_by"]
    list_filter = ["reward_kind"]
    search_fields = ["client__code", "note", "detail"]
    date_hierarchy = "created_at"
