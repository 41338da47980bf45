from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('pricing', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='ordercharge',
            name='advance_payment',
            field=models.JSONField(blank=True, null=True),
        ),
    ]
