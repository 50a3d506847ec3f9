import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import internships.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('users', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='InternshipApplication',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('institution_name', models.CharField(max_length=100)),
                ('institution_address', models.CharField(max_length=300)),
                ('contact_phone', models.CharField(max_length=20)),
                ('contact_email', models.EmailField(max_length=254)),
                ('authority_name', models.CharField(max_length=100)),
                ('authority_title', models.CharField(max_length=100)),
                ('internship_type', models.CharField(choices=[('IMU_402', 'IMU 402'), ('IMU_404', 'IMU 404'), ('MESLEKI_EGITIM_UYGULAMALI_DERS', 'Mesleki Eğitim Uygulamalı Ders'), ('ISTEGE_BAGLI_STAJ', 'İsteğe Bağlı Staj'), ('ZORUNLU_STAJ', 'Zorunlu Staj')], max_length=40)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField()),
                ('selected_days', models.CharField(max_length=50)),
                ('total_days', models.PositiveIntegerField()),
                ('health_insurance', models.CharField(choices=[('ALIYORUM', 'Alıyorum'), ('ALMIYORUM', 'Almıyorum')], max_length=10)),
                ('abroad', models.CharField(blank=True, choices=[('yurtiçi', 'Yurt içi'), ('yurtdışı', 'Yurt dışı')], max_length=10, null=True)),
                ('turkish_company', models.CharField(blank=True, choices=[('evet', 'Evet'), ('hayır', 'Hayır')], max_length=10, null=True)),
                ('transcript_file', models.FileField(blank=True, null=True, upload_to=internships.models.application_upload_to)),
                ('service_record_file', models.FileField(blank=True, null=True, upload_to=internships.models.application_upload_to)),
                ('insurance_file', models.FileField(blank=True, null=True, upload_to=internships.models.application_upload_to)),
                ('approval_letter', models.FileField(blank=True, null=True, upload_to='onay_belgeleri/')),
                ('advisor_email', models.EmailField(max_length=254)),
                ('status', models.CharField(choices=[('HOCA_ONAYI_BEKLIYOR', 'Danışman Onayı Bekliyor'), ('KARIYER_MERKEZI_ONAYI_BEKLIYOR', 'Kariyer Merkezi Onayı Bekliyor'), ('SIRKET_ONAYI_BEKLIYOR', 'Şirket Onayı Bekliyor'), ('ONAYLANDI', 'Onaylandı'), ('REDDEDILDI', 'Reddedildi'), ('IPTAL_EDILDI', 'İptal Edildi')], db_index=True, default='HOCA_ONAYI_BEKLIYOR', max_length=40)),
                ('advisor_decision', models.SmallIntegerField(choices=[(-1, 'Reddedildi'), (0, 'Bekliyor'), (1, 'Onaylandı')], default=0)),
                ('career_center_decision', models.SmallIntegerField(choices=[(-1, 'Reddedildi'), (0, 'Bekliyor'), (1, 'Onaylandı')], default=0)),
                ('company_decision', models.SmallIntegerField(choices=[(-1, 'Reddedildi'), (0, 'Bekliyor'), (1, 'Onaylandı')], default=0)),
                ('advisor_note', models.TextField(blank=True, null=True)),
                ('career_center_note', models.TextField(blank=True, null=True)),
                ('company_note', models.TextField(blank=True, null=True)),
                ('cancel_reason', models.TextField(blank=True, null=True)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('is_cap_application', models.BooleanField(default=False)),
                ('cap_faculty', models.CharField(blank=True, max_length=255, null=True)),
                ('cap_department', models.CharField(blank=True, max_length=255, null=True)),
                ('cap_program', models.CharField(blank=True, max_length=255, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('cap_record', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='applications', to='users.capuser')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='applications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='ExemptionApplication',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sgk4a_file', models.FileField(upload_to=internships.models.exemption_upload_to)),
                ('advisor_email', models.EmailField(max_length=254)),
                ('status', models.CharField(choices=[('HOCA_ONAYI_BEKLIYOR', 'Danışman Onayı Bekliyor'), ('ONAYLANDI', 'Onaylandı'), ('REDDEDILDI', 'Reddedildi')], default='HOCA_ONAYI_BEKLIYOR', max_length=40)),
                ('advisor_decision', models.SmallIntegerField(choices=[(-1, 'Reddedildi'), (0, 'Bekliyor'), (1, 'Onaylandı')], default=0)),
                ('advisor_note', models.TextField(blank=True, null=True)),
                ('is_cap_application', models.BooleanField(default=False)),
                ('cap_department', models.CharField(blank=True, max_length=255, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('cap_record', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='exemption_applications', to='users.capuser')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='exemption_applications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
    ]
