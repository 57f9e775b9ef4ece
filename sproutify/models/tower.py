from enum import Enum

from tortoise import fields, models


class TowerLocation(str, Enum):
    INDOOR = "indoor"
    GREENHOUSE = "greenhouse"
    OUTDOOR = "outdoor"


class Tower(models.Model):
    id = fields.IntField(pk=True)
    name = fields.CharField(max_length=255)
    ports = fields.IntField(default=28)
    location = fields.CharEnumField(TowerLocation, default=TowerLocation.INDOOR)

    teacher = fields.ForeignKeyField(
        "models.Profile",
        related_name="towers",
        on_delete=fields.CASCADE
    )

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "towers"
        ordering = ["name"]

    def __str__(self):
        return self.name


class TowerVitals(models.Model):
    id = fields.IntField(pk=True)
    tower = fields.ForeignKeyField("models.Tower", related_name="vitals", on_delete=fields.CASCADE)
    ph = fields.FloatField(null=True)
    ec = fields.FloatField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "tower_vitals"


class TowerPhoto(models.Model):
    id = fields.IntField(pk=True)
    tower = fields.ForeignKeyField("models.Tower", related_name="photos", on_delete=fields.CASCADE)
    file_url = fields.CharField(max_length=500)
    caption = fields.TextField(null=True)
    student_name = fields.CharField(max_length=100, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "tower_photos"
