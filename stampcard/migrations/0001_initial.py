# Generated migration for Account

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "username",
                    models.CharField(
                        help_text="Normalized (lower-case) login name",
                        max_length=150,
                        unique=True,
                        verbose_name="username",
                    ),
                ),
                (
                    "credential_hash",
                    models.CharField(max_length=255, verbose_name="credential hash"),
                ),
                (
                    "stamps",
                    models.IntegerField(
                        default=0,
                        help_text="Stamps on the current card",
                        verbose_name="stamps",
                    ),
                ),
                (
                    "rewards",
                    models.IntegerField(
                        default=0,
                        help_text="Lifetime redemptions",
                        verbose_name="rewards",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True, db_index=True, verbose_name="created at"
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(auto_now=True, verbose_name="updated at"),
                ),
            ],
            options={
                "verbose_name": "account",
                "verbose_name_plural": "accounts",
                "ordering": ["-stamps", "username"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("stamps__gte", 0)),
                        name="stampcard_account_stamps_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("rewards__gte", 0)),
                        name="stampcard_account_rewards_non_negative",
                    ),
                ],
            },
        ),
    ]
