from tortoise import fields, models


class PlantCatalog(models.Model):
    id = fields.IntField(pk=True)
    name = fields.CharField(max_length=255)
    category = fields.CharField(max_length=100, null=True)
    germination_days = fields.IntField(null=True)
    harvest_days = fields.IntField(null=True)

    class Meta:
        table = "plant_catalog"
        ordering = ["name"]


class Planting(models.Model):
    id = fields.IntField(pk=True)
    tower = fields.ForeignKeyField("models.Tower", related_name="plantings", on_delete=fields.CASCADE)
    catalog = fields.ForeignKeyField(
        "models.PlantCatalog",
        related_name="plantings",
        null=True,
        on_delete=fields.SET_NULL
    )

    name = fields.CharField(max_length=255)
    port_number = fields.IntField(null=True)
    seeded_at = fields.DateField(null=True)
    planted_at = fields.DateField(null=True)

    # seeded | growing | harvested | removed
    status = fields.CharField(max_length=20, default="seeded")

    # legacy free-text column, JSON object or plain notes (see services.planting_service)
    outcome = fields.TextField(null=True)

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "plantings"
