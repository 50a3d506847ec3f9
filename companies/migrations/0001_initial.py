import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('internships', '0001_initial'),
        ('logbooks', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='CompanyOTP',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('purpose', models.CharField(choices=[('basvuru', 'Başvuru Onayı'), ('defter', 'Defter Onayı')], max_length=10)),
                ('email', models.EmailField(max_length=254)),
                ('code', models.CharField(max_length=8)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('expires_at', models.DateTimeField()),
                ('is_used', models.BooleanField(default=False)),
                ('attempts', models.PositiveIntegerField(default=0)),
                ('application', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='company_otps', to='internships.internshipapplication')),
                ('logbook', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='company_otps', to='logbooks.logbook')),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
    ]
