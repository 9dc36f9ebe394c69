"""
Tallerman Models.

Core models for the workshop engine:
- Client, Vehicle: who owns what is being repaired
- Product, Batch: parts catalog and its dated, priced lots
- StockMove: immutable audit trail of batch quantity changes
- ExternalService, Slot: marketplace services and their time windows
- Evaluation, LineItem: diagnostic quote
- WorkOrder, WorkOrderItem: execution record of an approved quote
"""

from tallerman.models.batch import Batch
from tallerman.models.calendar import ExternalService, Slot
from tallerman.models.catalog import Client, Product, Vehicle
from tallerman.models.enums import (
    EvaluationStatus,
    LineItemOrigin,
    ProductStatus,
    RequestStatus,
    SlotKind,
    StaffRole,
    WorkOrderStatus,
)
from tallerman.models.evaluation import Evaluation, LineItem
from tallerman.models.move import StockMove
from tallerman.models.work_order import WorkOrder, WorkOrderItem

__all__ = [
    'EvaluationStatus',
    'LineItemOrigin',
    'ProductStatus',
    'RequestStatus',
    'SlotKind',
    'StaffRole',
    'WorkOrderStatus',
    'Client',
    'Vehicle',
    'Product',
    'Batch',
    'StockMove',
    'ExternalService',
    'Slot',
    'Evaluation',
    'LineItem',
    'WorkOrder',
    'WorkOrderItem',
]
