from tortoise import fields, models


class PestCatalog(models.Model):
    id = fields.IntField(pk=True)
    name = fields.CharField(max_length=255)
    scientific_name = fields.CharField(max_length=255, null=True)

    # pest | disease | nutrient | environmental
    type = fields.CharField(max_length=20, default="pest")

    description = fields.TextField(default="")
    identification_tips = fields.JSONField(default=list)
    symptoms = fields.JSONField(default=list)
    severity_levels = fields.JSONField(default=list)

    # array of options, a single option object, or a method -> option mapping
    treatment_options = fields.JSONField(null=True)

    prevention_tips = fields.JSONField(default=list)
    safe_for_schools = fields.BooleanField(default=True)
    common_locations = fields.JSONField(default=list)

    class Meta:
        table = "pest_catalog"
        ordering = ["name"]

    def __str__(self):
        return self.name


class PestLog(models.Model):
    id = fields.IntField(pk=True)
    tower = fields.ForeignKeyField("models.Tower", related_name="pest_logs", on_delete=fields.CASCADE)
    teacher = fields.ForeignKeyField(
        "models.Profile",
        related_name="pest_logs",
        null=True,
        on_delete=fields.SET_NULL
    )

    # free text, copied from the catalog item when one was picked
    pest = fields.CharField(max_length=255)
    pest_catalog = fields.ForeignKeyField(
        "models.PestCatalog",
        related_name="logs",
        null=True,
        on_delete=fields.SET_NULL
    )

    severity = fields.IntField(null=True)  # 1..3
    location_on_tower = fields.CharField(max_length=255, null=True)
    affected_plants = fields.JSONField(null=True)
    notes = fields.TextField(null=True)
    action = fields.TextField(null=True)
    treatment_applied = fields.JSONField(default=list)

    follow_up_needed = fields.BooleanField(default=False)
    follow_up_date = fields.DateField(null=True)

    resolved = fields.BooleanField(default=False)
    resolved_at = fields.DatetimeField(null=True)

    images = fields.JSONField(null=True)

    observed_at = fields.DatetimeField(auto_now_add=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "pest_logs"
        ordering = ["-observed_at"]
