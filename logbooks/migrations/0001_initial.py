import django.db.models.deletion
from django.db import migrations, models

import logbooks.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('internships', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Logbook',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('file', models.FileField(blank=True, null=True, upload_to=logbooks.models.logbook_upload_to)),
                ('original_file_name', models.CharField(blank=True, max_length=255, null=True)),
                ('file_size', models.PositiveIntegerField(blank=True, null=True)),
                ('upload_date', models.DateTimeField(blank=True, null=True)),
                ('status', models.CharField(choices=[('BEKLEMEDE', 'Beklemede'), ('SIRKET_ONAYI_BEKLIYOR', 'Şirket Onayı Bekliyor'), ('SIRKET_REDDETTI', 'Şirket Reddetti'), ('DANISMAN_ONAYI_BEKLIYOR', 'Danışman Onayı Bekliyor'), ('DANISMAN_REDDETTI', 'Danışman Reddetti'), ('ONAYLANDI', 'Onaylandı'), ('REDDEDILDI', 'Reddedildi')], db_index=True, default='BEKLEMEDE', max_length=30)),
                ('company_decision', models.SmallIntegerField(default=0)),
                ('advisor_decision', models.SmallIntegerField(default=0)),
                ('reject_reason', models.TextField(blank=True, null=True)),
                ('company_approved_at', models.DateTimeField(blank=True, null=True)),
                ('advisor_approved_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('application', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='logbook', to='internships.internshipapplication')),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
    ]
