import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import core.uploads


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Service",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("name_en", models.CharField(blank=True, max_length=200)),
                ("description", models.TextField(blank=True)),
                ("description_en", models.TextField(blank=True)),
                ("price", models.PositiveIntegerField()),
                ("category", models.CharField(choices=[("Instagram", "Instagram"), ("Facebook", "Facebook"), ("TikTok", "TikTok"), ("YouTube", "YouTube"), ("Other Services", "Other Services"), ("Digital Library", "Digital Library")], db_index=True, max_length=32)),
                ("duration", models.CharField(blank=True, help_text='Estimated delivery, e.g. "24 hours", "3-5 days"', max_length=64)),
                ("image", models.FileField(blank=True, null=True, upload_to=core.uploads.service_image_path)),
                ("digital_file", models.FileField(blank=True, null=True, upload_to=core.uploads.digital_file_path)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ("category", "price"),
                "indexes": [models.Index(fields=["is_active", "category"], name="service_active_cat_idx")],
            },
        ),
        migrations.CreateModel(
            name="Review",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("rating", models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
                ("comment", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("service", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="reviews", to="services.service")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="reviews", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ("-created_at",),
            },
        ),
    ]
