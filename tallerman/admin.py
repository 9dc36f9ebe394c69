"""
Tallerman Admin.

Provides views for production debugging:
- Client / Vehicle: list + edit
- Product: edit, with read-only batches inline
- Batch: read-only (stock only changes via StockLedger)
- StockMove: read-only audit trail
- Evaluation: read-only items inline
- WorkOrder: status / mechanic editable, snapshot items read-only
- ExternalService: edit, with read-only slots inline
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from tallerman.models import (
    Batch,
    Client,
    Evaluation,
    ExternalService,
    LineItem,
    Product,
    Slot,
    StockMove,
    Vehicle,
    WorkOrder,
    WorkOrderItem,
)


class ReadOnlyInline(admin.TabularInline):
    """Inline without add, change or delete."""

    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


# =========================================================================
# CLIENTS
# =========================================================================

class VehicleInline(admin.TabularInline):
    model = Vehicle
    extra = 0


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ['__str__', 'email', 'phone']
    search_fields = ['first_name', 'last_name', 'email']
    inlines = [VehicleInline]


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ['plate', 'brand', 'model', 'year', 'client']
    search_fields = ['plate', 'brand', 'model']


# =========================================================================
# INVENTORY
# =========================================================================

class BatchInline(ReadOnlyInline):
    model = Batch
    fields = ['code', 'entry_date', 'expiration_date', 'initial_quantity',
              'current_quantity', 'unit_cost', 'overstock_confirmed']
    readonly_fields = fields


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Product admin — batches are shown, never edited here."""

    list_display = ['sku', 'name', 'category', 'location', 'price', 'status',
                    'available_display']
    list_filter = ['status', 'category']
    search_fields = ['sku', 'name', 'category', 'location']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [BatchInline]

    @admin.display(description=_('Disponible'))
    def available_display(self, obj):
        return obj.available_quantity


@admin.register(Batch)
class BatchAdmin(admin.ModelAdmin):
    """Batch admin — read-only. Corrections go through StockLedger."""

    list_display = ['__str__', 'product', 'entry_date', 'current_quantity',
                    'unit_cost', 'expiration_date', 'is_expired_display',
                    'overstock_confirmed']
    list_filter = ['entry_date', 'overstock_confirmed']
    search_fields = ['code', 'supplier', 'product__sku']
    date_hierarchy = 'entry_date'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description=_('¿Vencido?'), boolean=True)
    def is_expired_display(self, obj):
        return obj.is_expired


@admin.register(StockMove)
class StockMoveAdmin(admin.ModelAdmin):
    """StockMove admin — read-only. Immutable audit trail."""

    list_display = ['timestamp', 'product', 'batch_ref', 'delta', 'reason', 'user']
    list_filter = ['timestamp', 'user']
    search_fields = ['reason', 'product__sku']
    date_hierarchy = 'timestamp'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =========================================================================
# EVALUATIONS / WORK ORDERS
# =========================================================================

class LineItemInline(ReadOnlyInline):
    model = LineItem
    fields = ['position', 'description', 'origin', 'price', 'approved']
    readonly_fields = fields


@admin.register(Evaluation)
class EvaluationAdmin(admin.ModelAdmin):
    """Evaluation admin — transitions only through EvaluationEngine."""

    list_display = ['id', 'vehicle', 'client', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['vehicle__plate', 'client__last_name']
    readonly_fields = ['client', 'vehicle', 'status', 'sent_at', 'resolved_at',
                       'created_at', 'updated_at']
    inlines = [LineItemInline]


class WorkOrderItemInline(ReadOnlyInline):
    model = WorkOrderItem
    fields = ['position', 'description', 'origin', 'quantity', 'price']
    readonly_fields = fields


@admin.register(WorkOrder)
class WorkOrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'evaluation', 'status', 'mechanic', 'created_at']
    list_filter = ['status', 'mechanic']
    readonly_fields = ['evaluation', 'metadata', 'created_at', 'updated_at']
    inlines = [WorkOrderItemInline]


# =========================================================================
# EXTERNAL SERVICES
# =========================================================================

class SlotInline(ReadOnlyInline):
    model = Slot
    fields = ['start', 'end', 'kind', 'evaluation', 'request_status', 'requested_by', 'responded_at']
    readonly_fields = fields


@admin.register(ExternalService)
class ExternalServiceAdmin(admin.ModelAdmin):
    list_display = ['title', 'owner', 'category', 'price', 'available']
    list_filter = ['available', 'category']
    search_fields = ['title', 'description']
    inlines = [SlotInline]
