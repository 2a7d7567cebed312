# Generated migration for the region hierarchy and people

from django.db import migrations, models
import django.db.models.deletion
import regionwatch.models.person


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Region",
            fields=[
                ("id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("name", models.CharField(default="", max_length=255)),
                (
                    "region_type",
                    models.CharField(
                        choices=[
                            ("district", "DISTRICT"),
                            ("city", "CITY"),
                            ("federal_region", "FEDERAL_REGION"),
                            ("country", "COUNTRY"),
                        ],
                        max_length=20,
                    ),
                ),
                ("population_count", models.PositiveIntegerField(default=0)),
                ("average_social_rating", models.FloatField(default=0.0)),
                ("important_persons_count", models.PositiveIntegerField(default=0)),
                ("under_threat", models.BooleanField(default=False)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="children",
                        to="regionwatch.region",
                    ),
                ),
            ],
            options={
                "db_table": "regionwatch_region",
            },
        ),
        migrations.CreateModel(
            name="Person",
            fields=[
                (
                    "id",
                    models.CharField(
                        default=regionwatch.models.person.generate_person_id,
                        max_length=64,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("full_name", models.CharField(default="", max_length=255)),
                ("social_rating", models.FloatField(default=0.0)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("low", "LOW"),
                            ("regular", "REGULAR"),
                            ("important", "IMPORTANT"),
                            ("vip", "VIP"),
                        ],
                        default="low",
                        max_length=20,
                    ),
                ),
                ("active", models.BooleanField(default=True)),
                ("last_location_update", models.DateTimeField(blank=True, null=True)),
                (
                    "district",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="regionwatch.region",
                    ),
                ),
                (
                    "city",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="regionwatch.region",
                    ),
                ),
                (
                    "federal_region",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="regionwatch.region",
                    ),
                ),
                (
                    "country",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="regionwatch.region",
                    ),
                ),
            ],
            options={
                "db_table": "regionwatch_person",
            },
        ),
        migrations.AddIndex(
            model_name="region",
            index=models.Index(fields=["region_type"], name="region_type_idx"),
        ),
        migrations.AddIndex(
            model_name="region",
            index=models.Index(fields=["parent"], name="region_parent_idx"),
        ),
        migrations.AddIndex(
            model_name="person",
            index=models.Index(fields=["district", "active"], name="person_district_active_idx"),
        ),
        migrations.AddIndex(
            model_name="person",
            index=models.Index(fields=["city", "active"], name="person_city_active_idx"),
        ),
        migrations.AddIndex(
            model_name="person",
            index=models.Index(
                fields=["federal_region", "active"], name="person_fedregion_active_idx"
            ),
        ),
        migrations.AddIndex(
            model_name="person",
            index=models.Index(fields=["country", "active"], name="person_country_active_idx"),
        ),
    ]
