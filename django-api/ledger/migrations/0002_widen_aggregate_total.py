from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("ledger", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="aggregate",
            name="total_amount",
            field=models.DecimalField(decimal_places=2, max_digits=18),
        ),
    ]
