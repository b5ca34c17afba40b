"""
Initial migration for Gemman models.
"""

from decimal import Decimal
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Gemman models: InventoryUnit, SyncRun, DocumentSequence."""

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='InventoryUnit',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('stock_id', models.CharField(help_text='Identificador do fornecedor', max_length=64, unique=True, verbose_name='Stock ID')),
                ('certificate_no', models.CharField(blank=True, default='', max_length=64, verbose_name='Certificado')),
                ('shape', models.CharField(blank=True, db_index=True, default='', max_length=32, verbose_name='Formato')),
                ('size', models.DecimalField(db_index=True, decimal_places=3, default=Decimal('0'), max_digits=8, verbose_name='Peso (ct)')),
                ('color', models.CharField(blank=True, db_index=True, default='', max_length=16, verbose_name='Cor')),
                ('clarity', models.CharField(blank=True, db_index=True, default='', max_length=16, verbose_name='Pureza')),
                ('cut', models.CharField(blank=True, max_length=16, null=True, verbose_name='Lapidação')),
                ('polish', models.CharField(blank=True, default='', max_length=16, verbose_name='Polimento')),
                ('symmetry', models.CharField(blank=True, default='', max_length=16, verbose_name='Simetria')),
                ('fluorescence', models.CharField(blank=True, default='', max_length=16, verbose_name='Fluorescência')),
                ('lab', models.CharField(blank=True, default='', max_length=16, verbose_name='Laboratório')),
                ('rap_price', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=14, verbose_name='Preço Rap')),
                ('rap_amount', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=14, verbose_name='Valor Rap')),
                ('discount', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=7, verbose_name='Desconto (%)')),
                ('price_per_carat', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=14, verbose_name='Preço por Quilate')),
                ('final_amount', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=14, verbose_name='Valor Total')),
                ('measurement', models.CharField(blank=True, default='', max_length=64, verbose_name='Medidas')),
                ('length', models.DecimalField(blank=True, decimal_places=2, max_digits=8, null=True)),
                ('width', models.DecimalField(blank=True, decimal_places=2, max_digits=8, null=True)),
                ('height', models.DecimalField(blank=True, decimal_places=2, max_digits=8, null=True)),
                ('depth', models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ('table', models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ('ratio', models.DecimalField(blank=True, decimal_places=3, max_digits=6, null=True)),
                ('girdle', models.CharField(blank=True, max_length=64, null=True)),
                ('culet', models.CharField(blank=True, max_length=32, null=True)),
                ('crown_angle', models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ('crown_height', models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ('pavilion_angle', models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ('pavilion_depth', models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ('fancy_color', models.CharField(blank=True, max_length=64, null=True)),
                ('fancy_intensity', models.CharField(blank=True, max_length=64, null=True)),
                ('fancy_overtone', models.CharField(blank=True, max_length=64, null=True)),
                ('location', models.CharField(blank=True, max_length=64, null=True, verbose_name='Localização')),
                ('inscription', models.CharField(blank=True, max_length=128, null=True)),
                ('comment', models.TextField(blank=True, null=True, verbose_name='Comentário')),
                ('video_url', models.URLField(blank=True, max_length=500, null=True)),
                ('image_url', models.URLField(blank=True, max_length=500, null=True)),
                ('cert_url', models.URLField(blank=True, max_length=500, null=True)),
                ('feed_status', models.CharField(blank=True, default='', help_text='Informativo. Não altera o ciclo de vida.', max_length=32, verbose_name='Status no Fornecedor')),
                ('status', models.CharField(choices=[('available', 'Disponível'), ('held', 'Reservada'), ('memo', 'Em Consignação'), ('sold', 'Vendida')], db_index=True, default='available', max_length=20, verbose_name='Status')),
                ('owning_transaction_id', models.CharField(blank=True, db_index=True, help_text='Pedido, remessa ou memo que reservou/comprou a pedra', max_length=64, null=True, verbose_name='Transação Responsável')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Pedra',
                'verbose_name_plural': 'Pedras',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['status', 'updated_at'], name='unit_status_updated_idx')],
                'constraints': [
                    models.CheckConstraint(
                        condition=(
                            models.Q(('owning_transaction_id__isnull', True), ('status', 'available'))
                            | models.Q(models.Q(('status', 'available'), _negated=True), ('owning_transaction_id__isnull', False))
                        ),
                        name='unit_owner_matches_status',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='SyncRun',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('started', 'Em Andamento'), ('completed', 'Concluída'), ('failed', 'Falhou')], db_index=True, default='started', max_length=20, verbose_name='Status')),
                ('trigger', models.CharField(choices=[('schedule', 'Agendada'), ('manual', 'Manual'), ('command', 'Comando')], default='manual', max_length=20, verbose_name='Origem')),
                ('message', models.TextField(blank=True, default='', verbose_name='Mensagem')),
                ('error_code', models.CharField(blank=True, default='', help_text='Vazio quando não houve falha', max_length=40, verbose_name='Código do Erro')),
                ('processed_count', models.PositiveIntegerField(default=0, verbose_name='Processadas')),
                ('total_count', models.PositiveIntegerField(default=0, verbose_name='Total no Fornecedor')),
                ('skipped_count', models.PositiveIntegerField(default=0, verbose_name='Ignoradas')),
                ('started_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Início')),
                ('finished_at', models.DateTimeField(blank=True, null=True, verbose_name='Fim')),
            ],
            options={
                'verbose_name': 'Sincronização',
                'verbose_name_plural': 'Sincronizações',
                'ordering': ['-started_at'],
                'constraints': [
                    models.UniqueConstraint(
                        condition=models.Q(('status', 'started')),
                        fields=('status',),
                        name='single_active_sync_run',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='DocumentSequence',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('document_type', models.CharField(max_length=20, verbose_name='Tipo de Documento')),
                ('bucket', models.DateField(verbose_name='Dia')),
                ('last_value', models.PositiveIntegerField(verbose_name='Último Número')),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Sequência de Documento',
                'verbose_name_plural': 'Sequências de Documento',
                'ordering': ['-bucket', 'document_type'],
                'constraints': [
                    models.UniqueConstraint(
                        fields=('document_type', 'bucket'),
                        name='unique_document_sequence_bucket',
                    ),
                ],
            },
        ),
    ]
