"""
Provider answers on hired slots, and unique item positions.
"""

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('tallerman', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.AddField(
            model_name='slot',
            name='request_status',
            field=models.CharField(
                blank=True,
                choices=[
                    ('pending', 'Pendiente'),
                    ('accepted', 'Aceptada'),
                    ('rejected', 'Rechazada'),
                    ('completed', 'Finalizada'),
                ],
                default='',
                help_text='Respuesta del proveedor; vacío si nunca fue contratado',
                max_length=20,
                verbose_name='Estado de la solicitud',
            ),
        ),
        migrations.AddField(
            model_name='slot',
            name='requested_by',
            field=models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name='slot_requests',
                to=settings.AUTH_USER_MODEL,
                verbose_name='Solicitado por',
            ),
        ),
        migrations.AddField(
            model_name='slot',
            name='responded_at',
            field=models.DateTimeField(blank=True, null=True, verbose_name='Respondida en'),
        ),
        migrations.AddConstraint(
            model_name='lineitem',
            constraint=models.UniqueConstraint(
                fields=('evaluation', 'position'),
                name='taller_item_unique_position',
            ),
        ),
    ]
