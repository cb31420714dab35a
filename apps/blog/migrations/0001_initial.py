import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Post",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200)),
                ("slug", models.CharField(max_length=255, unique=True)),
                ("content", models.TextField(blank=True, null=True)),
                ("excerpt", models.TextField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("published", "Published")],
                        default="draft",
                        max_length=20,
                    ),
                ),
                ("category", models.CharField(default="Technology", max_length=100)),
                ("featured_image", models.TextField(blank=True, null=True)),
                ("cover_image", models.TextField(blank=True, null=True)),
                ("is_featured", models.BooleanField(default=False)),
                ("author", models.CharField(default="Admin", max_length=255)),
                ("author_title", models.CharField(default="Content Creator", max_length=255)),
                ("author_avatar", models.CharField(default="AD", max_length=255)),
                ("meta_title", models.CharField(blank=True, max_length=255, null=True)),
                ("meta_description", models.TextField(blank=True, null=True)),
                ("keywords", models.TextField(blank=True, null=True)),
                ("image_alt", models.CharField(blank=True, max_length=255, null=True)),
                ("read_time", models.IntegerField(default=0)),
                ("canonical_url", models.TextField(blank=True, null=True)),
                ("seo_score", models.IntegerField(default=0)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "posts",
                "ordering": ["-updated_at", "-id"],
            },
        ),
    ]
