"""
Initial migration for Tallerman models.
"""

from decimal import Decimal
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create catalog, inventory, booking, evaluation and work order models."""

    initial = True

    dependencies = [
        ('contenttypes', '0002_remove_content_type_name'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Client',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('first_name', models.CharField(max_length=100, verbose_name='Nombre')),
                ('last_name', models.CharField(blank=True, default='', max_length=100, verbose_name='Apellido')),
                ('email', models.EmailField(blank=True, default='', max_length=254, verbose_name='Correo')),
                ('phone', models.CharField(blank=True, default='', max_length=30, verbose_name='Teléfono')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name': 'Cliente',
                'verbose_name_plural': 'Clientes',
                'ordering': ['last_name', 'first_name'],
            },
        ),
        migrations.CreateModel(
            name='Vehicle',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('brand', models.CharField(max_length=60, verbose_name='Marca')),
                ('model', models.CharField(max_length=60, verbose_name='Modelo')),
                ('plate', models.CharField(max_length=20, unique=True, verbose_name='Patente')),
                ('year', models.PositiveSmallIntegerField(blank=True, null=True, verbose_name='Año')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='vehicles', to='tallerman.client', verbose_name='Cliente')),
            ],
            options={
                'verbose_name': 'Vehículo',
                'verbose_name_plural': 'Vehículos',
                'ordering': ['plate'],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, verbose_name='Nombre')),
                ('sku', models.CharField(max_length=60, unique=True, verbose_name='SKU')),
                ('category', models.CharField(blank=True, default='', max_length=100, verbose_name='Categoría')),
                ('location', models.CharField(blank=True, default='', help_text='Estante o bodega donde se guarda', max_length=100, verbose_name='Ubicación')),
                ('price', models.DecimalField(decimal_places=2, default=0, max_digits=12, verbose_name='Precio de venta')),
                ('status', models.CharField(choices=[('active', 'Activo'), ('inactive', 'Inactivo')], default='active', max_length=20, verbose_name='Estado')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Producto',
                'verbose_name_plural': 'Productos',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Batch',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(blank=True, default='', max_length=50, verbose_name='Código del Lote')),
                ('supplier', models.CharField(blank=True, default='', max_length=200, verbose_name='Proveedor')),
                ('initial_quantity', models.PositiveIntegerField(verbose_name='Cantidad inicial')),
                ('current_quantity', models.PositiveIntegerField(verbose_name='Cantidad actual')),
                ('unit_cost', models.DecimalField(decimal_places=2, max_digits=12, verbose_name='Costo unitario')),
                ('entry_date', models.DateField(db_index=True, verbose_name='Fecha de ingreso')),
                ('expiration_date', models.DateField(blank=True, null=True, verbose_name='Fecha de vencimiento')),
                ('overstock_confirmed', models.BooleanField(default=False, help_text='Corrección manual con cantidad actual mayor a la inicial', verbose_name='Sobrestock confirmado')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Creado en')),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='batches', to='tallerman.product', verbose_name='Producto')),
            ],
            options={
                'verbose_name': 'Lote',
                'verbose_name_plural': 'Lotes',
                'ordering': ['entry_date', 'pk'],
                'indexes': [models.Index(fields=['product', 'entry_date'], name='taller_batch_product_entry')],
            },
        ),
        migrations.CreateModel(
            name='ExternalService',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=200, verbose_name='Título')),
                ('description', models.TextField(blank=True, default='', verbose_name='Descripción')),
                ('category', models.CharField(blank=True, default='', max_length=100, verbose_name='Categoría')),
                ('price', models.DecimalField(decimal_places=2, max_digits=12, verbose_name='Precio')),
                ('duration_minutes', models.PositiveIntegerField(blank=True, null=True, verbose_name='Duración (min)')),
                ('available', models.BooleanField(default=True, help_text='Si está desactivado no se puede contratar', verbose_name='Disponible')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='external_services', to=settings.AUTH_USER_MODEL, verbose_name='Publicado por')),
            ],
            options={
                'verbose_name': 'Servicio Externo',
                'verbose_name_plural': 'Servicios Externos',
                'ordering': ['title'],
            },
        ),
        migrations.CreateModel(
            name='Evaluation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('draft', 'Borrador'), ('sent', 'Enviada'), ('approved', 'Aprobada'), ('rejected', 'Rechazada')], db_index=True, default='draft', max_length=20, verbose_name='Estado')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Observaciones')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('sent_at', models.DateTimeField(blank=True, null=True, verbose_name='Enviada en')),
                ('resolved_at', models.DateTimeField(blank=True, help_text='Fecha de aprobación o rechazo', null=True, verbose_name='Resuelta en')),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='evaluations', to='tallerman.client', verbose_name='Cliente')),
                ('vehicle', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='evaluations', to='tallerman.vehicle', verbose_name='Vehículo')),
            ],
            options={
                'verbose_name': 'Evaluación',
                'verbose_name_plural': 'Evaluaciones',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['vehicle', 'status'], name='taller_eval_vehicle_status')],
            },
        ),
        migrations.CreateModel(
            name='Slot',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(blank=True, default='', max_length=200, verbose_name='Título')),
                ('start', models.DateTimeField(verbose_name='Inicio')),
                ('end', models.DateTimeField(verbose_name='Fin')),
                ('kind', models.CharField(choices=[('available', 'Disponible'), ('booked', 'Reservado')], db_index=True, default='available', max_length=20, verbose_name='Tipo')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('evaluation', models.ForeignKey(blank=True, help_text='Evaluación que contrató este horario', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='booked_slots', to='tallerman.evaluation', verbose_name='Evaluación')),
                ('service', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='slots', to='tallerman.externalservice', verbose_name='Servicio')),
            ],
            options={
                'verbose_name': 'Horario',
                'verbose_name_plural': 'Horarios',
                'ordering': ['service', 'start'],
                'indexes': [models.Index(fields=['service', 'start'], name='taller_slot_service_start')],
            },
        ),
        migrations.CreateModel(
            name='LineItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('position', models.PositiveIntegerField(verbose_name='Posición')),
                ('description', models.CharField(max_length=255, verbose_name='Descripción')),
                ('price', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12, verbose_name='Precio')),
                ('approved', models.BooleanField(default=True, help_text='Marcar si el cliente aprueba este ítem', verbose_name='Aprobado')),
                ('origin', models.CharField(choices=[('diagnosis', 'Diagnóstico'), ('manual', 'Mano de obra'), ('inventory', 'Repuesto'), ('external', 'Externo')], default='manual', max_length=20, verbose_name='Origen')),
                ('quantity', models.PositiveIntegerField(blank=True, null=True, verbose_name='Cantidad')),
                ('consumption', models.JSONField(blank=True, default=list, verbose_name='Consumo de lotes')),
                ('consumption_committed', models.BooleanField(default=False, help_text='La orden de trabajo ya descontó este consumo', verbose_name='Consumo definitivo')),
                ('external_ref', models.CharField(blank=True, default='', max_length=100, verbose_name='Referencia externa')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('evaluation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='tallerman.evaluation', verbose_name='Evaluación')),
                ('external_service', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='tallerman.externalservice', verbose_name='Servicio externo')),
                ('product', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='tallerman.product', verbose_name='Producto')),
                ('slot', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='tallerman.slot', verbose_name='Horario')),
            ],
            options={
                'verbose_name': 'Ítem',
                'verbose_name_plural': 'Ítems',
                'ordering': ['evaluation', 'position'],
                'indexes': [models.Index(fields=['evaluation', 'position'], name='taller_item_eval_position')],
            },
        ),
        migrations.CreateModel(
            name='StockMove',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('batch_ref', models.PositiveIntegerField(verbose_name='ID del Lote')),
                ('delta', models.IntegerField(help_text='Positivo = entrada, Negativo = salida', verbose_name='Variación')),
                ('reference_id', models.PositiveIntegerField(blank=True, null=True, verbose_name='ID de Referencia')),
                ('reason', models.CharField(help_text='Obligatorio. Ej: "Ingreso proveedor", "Evaluación #12"', max_length=255, verbose_name='Motivo')),
                ('metadata', models.JSONField(blank=True, default=dict, verbose_name='Metadatos')),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Fecha/Hora')),
                ('batch', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='moves', to='tallerman.batch', verbose_name='Lote')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='moves', to='tallerman.product', verbose_name='Producto')),
                ('reference_type', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='contenttypes.contenttype', verbose_name='Tipo de Referencia')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL, verbose_name='Usuario')),
            ],
            options={
                'verbose_name': 'Movimiento',
                'verbose_name_plural': 'Movimientos',
                'ordering': ['timestamp', 'pk'],
                'indexes': [models.Index(fields=['product', 'timestamp'], name='taller_move_product_time')],
            },
        ),
        migrations.CreateModel(
            name='WorkOrder',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('pending', 'Pendiente'), ('in_progress', 'En Taller'), ('waiting_parts', 'Esp. Repuestos'), ('finished', 'Terminado'), ('delivered', 'Entregado')], db_index=True, default='pending', max_length=20, verbose_name='Estado')),
                ('internal_notes', models.TextField(blank=True, default='', verbose_name='Notas internas')),
                ('metadata', models.JSONField(blank=True, default=dict, verbose_name='Metadatos')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('evaluation', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='work_order', to='tallerman.evaluation', verbose_name='Evaluación')),
                ('mechanic', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='work_orders', to=settings.AUTH_USER_MODEL, verbose_name='Mecánico')),
            ],
            options={
                'verbose_name': 'Orden de Trabajo',
                'verbose_name_plural': 'Órdenes de Trabajo',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='WorkOrderItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('position', models.PositiveIntegerField(verbose_name='Posición')),
                ('description', models.CharField(max_length=255, verbose_name='Descripción')),
                ('price', models.DecimalField(decimal_places=2, max_digits=12, verbose_name='Precio')),
                ('origin', models.CharField(choices=[('diagnosis', 'Diagnóstico'), ('manual', 'Mano de obra'), ('inventory', 'Repuesto'), ('external', 'Externo')], max_length=20, verbose_name='Origen')),
                ('quantity', models.PositiveIntegerField(blank=True, null=True, verbose_name='Cantidad')),
                ('sku', models.CharField(blank=True, default='', max_length=60, verbose_name='SKU')),
                ('external_ref', models.CharField(blank=True, default='', max_length=100, verbose_name='Referencia externa')),
                ('work_order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='tallerman.workorder', verbose_name='Orden')),
            ],
            options={
                'verbose_name': 'Ítem de Orden',
                'verbose_name_plural': 'Ítems de Orden',
                'ordering': ['work_order', 'position'],
            },
        ),
    ]
