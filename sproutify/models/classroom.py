from tortoise import fields, models


class Classroom(models.Model):
    id = fields.IntField(pk=True)
    name = fields.CharField(max_length=255)
    teacher = fields.ForeignKeyField(
        "models.Profile",
        related_name="classrooms",
        on_delete=fields.CASCADE
    )
    kiosk_pin = fields.CharField(max_length=20, unique=True)

    # K-2 | 3-5 | 6-8 | 9-12
    grade_level = fields.CharField(max_length=10, default="3-5")

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "classrooms"

    def __str__(self):
        return self.name


class Student(models.Model):
    id = fields.IntField(pk=True)
    classroom = fields.ForeignKeyField(
        "models.Classroom",
        related_name="students",
        on_delete=fields.CASCADE
    )
    display_name = fields.CharField(max_length=100)

    first_login_at = fields.DatetimeField(null=True)
    last_login_at = fields.DatetimeField(null=True)

    class Meta:
        table = "students"
        unique_together = (("classroom", "display_name"),)

    def __str__(self):
        return self.display_name
