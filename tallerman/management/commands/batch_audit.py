"""
Management command to audit batches.

Usage:
    python manage.py batch_audit              # expired and flagged
    python manage.py batch_audit --expired
    python manage.py batch_audit --flagged
"""

from django.core.management.base import BaseCommand

from tallerman.models import Batch


class Command(BaseCommand):
    """List expired batches with remaining stock and confirmed overstock corrections."""

    help = 'Revisa lotes vencidos con stock y correcciones con sobrestock'

    def add_arguments(self, parser):
        parser.add_argument(
            '--expired',
            action='store_true',
            help='Solo lotes vencidos que aún tienen stock'
        )
        parser.add_argument(
            '--flagged',
            action='store_true',
            help='Solo lotes con sobrestock confirmado'
        )

    def handle(self, *args, **options):
        show_all = not options['expired'] and not options['flagged']
        found = 0

        if show_all or options['expired']:
            expired = Batch.objects.expired().active().select_related('product')
            for batch in expired:
                self.stdout.write(
                    f'VENCIDO {batch.product.sku} {batch} (venció {batch.expiration_date})'
                )
                found += 1

        if show_all or options['flagged']:
            flagged = Batch.objects.flagged().select_related('product')
            for batch in flagged:
                self.stdout.write(
                    f'SOBRESTOCK {batch.product.sku} {batch}'
                )
                found += 1

        if found:
            self.stdout.write(self.style.WARNING(f'{found} lote(s) requieren revisión'))
        else:
            self.stdout.write(self.style.SUCCESS('Sin lotes por revisar'))
