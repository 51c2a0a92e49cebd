from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="UserAISettings",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("user_id", models.UUIDField(unique=True)),
                (
                    "ai_provider",
                    models.CharField(
                        choices=[
                            ("lovable", "Lovable AI Gateway"),
                            ("openai", "OpenAI"),
                            ("openrouter", "OpenRouter"),
                            ("local", "Local (OpenAI-compatible)"),
                        ],
                        default="lovable",
                        max_length=16,
                    ),
                ),
                ("ai_model", models.CharField(blank=True, max_length=255)),
                ("ai_api_key", models.CharField(blank=True, max_length=512)),
                ("ai_base_url", models.URLField(blank=True, max_length=512)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "user AI settings",
                "verbose_name_plural": "user AI settings",
            },
        ),
    ]
