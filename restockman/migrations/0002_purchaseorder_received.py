# Generated manually: delivery marker for purchase orders.
# Received orders leave the overdue set.

from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('restockman', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='purchaseorder',
            name='received_at',
            field=models.DateTimeField(blank=True, null=True, verbose_name='Received at'),
        ),
        migrations.AlterField(
            model_name='purchaseorder',
            name='status',
            field=models.CharField(
                choices=[('created', 'Created'), ('sent', 'Sent'), ('received', 'Received')],
                db_index=True,
                default='created',
                max_length=10,
                verbose_name='Status',
            ),
        ),
    ]
