from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import orders.utils


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.CharField(default=orders.utils.generate_order_id, editable=False, max_length=64, primary_key=True, serialize=False)),
                ('email', models.EmailField(blank=True, default='', max_length=254)),
                ('delivery_name', models.CharField(blank=True, default='', max_length=128)),
                ('delivery_phone', models.CharField(blank=True, default='', max_length=20)),
                ('item_count', models.PositiveIntegerField(default=0)),
                ('total', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('status', models.CharField(choices=[('pending_payment', 'Pending payment'), ('pending', 'Pending'), ('payment_failed', 'Payment failed'), ('cancelled', 'Cancelled'), ('out_for_delivery', 'Out for delivery'), ('delivered', 'Delivered')], db_index=True, default='pending_payment', max_length=32)),
                ('payment_status', models.CharField(blank=True, default='', max_length=32)),
                ('payment_verified', models.BooleanField(default=False)),
                ('payment_completed', models.BooleanField(default=False)),
                ('payment_completed_at', models.DateTimeField(blank=True, null=True)),
                ('gateway_transaction_id', models.CharField(blank=True, db_index=True, default='', max_length=64)),
                ('payment_initiated', models.BooleanField(default=False)),
                ('payment_initiated_at', models.DateTimeField(blank=True, null=True)),
                ('payment_data', models.JSONField(blank=True, null=True)),
                ('payment_updated_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='orders', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ('-created_at',),
            },
        ),
    ]
