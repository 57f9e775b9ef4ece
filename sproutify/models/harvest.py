from tortoise import fields, models


class Harvest(models.Model):
    id = fields.IntField(pk=True)
    tower = fields.ForeignKeyField("models.Tower", related_name="harvests", on_delete=fields.CASCADE)
    plant_name = fields.CharField(max_length=255, null=True)
    weight_grams = fields.FloatField(default=0)
    destination = fields.CharField(max_length=255, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "harvests"


class WasteLog(models.Model):
    id = fields.IntField(pk=True)
    tower = fields.ForeignKeyField("models.Tower", related_name="waste_logs", on_delete=fields.CASCADE)
    plant_name = fields.CharField(max_length=255, null=True)
    grams = fields.FloatField(default=0)
    notes = fields.TextField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "waste_logs"
