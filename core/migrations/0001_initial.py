import core.models
import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("contenttypes", "0002_remove_content_type_name"),
        ("users", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Team",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                (
                    "team_number",
                    models.PositiveIntegerField(
                        unique=True,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(9999),
                        ],
                    ),
                ),
                (
                    "program",
                    models.CharField(
                        choices=[("frc", "FIRST Robotics Competition"), ("ftc", "FIRST Tech Challenge")],
                        default="frc",
                        max_length=8,
                    ),
                ),
                ("first_region", models.CharField(blank=True, max_length=64, null=True)),
                ("description", models.TextField(blank=True, null=True)),
                (
                    "invite_code",
                    models.CharField(
                        default=core.models.generate_invite_code,
                        help_text="Code teammates enter to join this team.",
                        max_length=16,
                        unique=True,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["team_number"],
                "indexes": [models.Index(fields=["invite_code"], name="team_invite_code_idx")],
            },
        ),
        migrations.CreateModel(
            name="DomainActivity",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("verb", models.CharField(db_index=True, max_length=64)),
                ("object_id", models.PositiveIntegerField()),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("timestamp", models.DateTimeField(auto_now_add=True, db_index=True)),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="activities",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "content_type",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        to="contenttypes.contenttype",
                    ),
                ),
                (
                    "team",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="activities",
                        to="core.team",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "Domain Activities",
                "ordering": ["-timestamp", "-id"],
                "indexes": [models.Index(fields=["team", "-timestamp"], name="activity_team_ts_idx")],
            },
        ),
    ]
