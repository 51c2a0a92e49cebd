import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AssistantUserLimit",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("user_id", models.UUIDField(unique=True)),
                ("out_of_context_count", models.PositiveIntegerField(default=0)),
                ("window_start", models.DateTimeField()),
                ("blocked_until", models.DateTimeField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name="AssistantFeedback",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("user_id", models.UUIDField()),
                ("question", models.TextField()),
                ("answer", models.TextField()),
                (
                    "query_type",
                    models.CharField(
                        choices=[
                            ("business", "Business"),
                            ("technical", "Technical"),
                            ("out_of_context", "Out of context"),
                        ],
                        max_length=16,
                    ),
                ),
                ("chunk_ids_used", models.JSONField(blank=True, default=list)),
                ("needs_investigation", models.BooleanField(default=False)),
                ("feedback_score", models.SmallIntegerField(blank=True, null=True)),
                ("resolved", models.BooleanField(default=False)),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["user_id", "created_at"], name="assistant_a_user_id_5a1f0c_idx"
                    ),
                    models.Index(
                        fields=["needs_investigation", "resolved"],
                        name="assistant_a_needs_i_8c2e41_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="KnowledgeChunk",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("chunk_id", models.CharField(max_length=128, unique=True)),
                ("category", models.CharField(max_length=64)),
                ("audience", models.JSONField(blank=True, default=list)),
                ("title", models.CharField(max_length=255)),
                ("business_description", models.TextField(blank=True)),
                ("technical_description", models.TextField(blank=True)),
                ("route", models.CharField(blank=True, max_length=255)),
                ("related_files", models.JSONField(blank=True, default=list)),
                ("keywords", models.JSONField(blank=True, default=list)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["category", "title"],
                "indexes": [
                    models.Index(
                        fields=["is_active", "route"], name="assistant_k_is_acti_3d7b92_idx"
                    )
                ],
            },
        ),
    ]
