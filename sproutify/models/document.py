from tortoise import fields, models


class TowerDocument(models.Model):
    id = fields.IntField(pk=True)
    # milestones belong to a classroom and may have no tower
    tower = fields.ForeignKeyField(
        "models.Tower",
        related_name="documents",
        null=True,
        on_delete=fields.CASCADE
    )
    classroom = fields.ForeignKeyField(
        "models.Classroom",
        related_name="documents",
        null=True,
        on_delete=fields.CASCADE
    )
    teacher = fields.ForeignKeyField(
        "models.Profile",
        related_name="documents",
        null=True,
        on_delete=fields.SET_NULL
    )

    title = fields.CharField(max_length=500)
    description = fields.TextField(null=True)

    # milestone | generated | timeline | study-guide | faq | report | ...
    document_type = fields.CharField(max_length=30, null=True)

    # study-guide | faq | timeline | audio | report | visualization
    # null only on legacy rows that predate the column
    output_type = fields.CharField(max_length=20, null=True)

    # planting | harvest | observation | achievement | learning | custom
    milestone_type = fields.CharField(max_length=50, null=True)
    content = fields.TextField(null=True)

    file_name = fields.CharField(max_length=500, null=True)
    file_path = fields.CharField(max_length=500, null=True)
    file_url = fields.TextField(null=True)
    file_size = fields.IntField(default=0)
    file_type = fields.CharField(max_length=100, null=True)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "tower_documents"
        ordering = ["-created_at"]

    def __str__(self):
        return f"Document #{self.id}: {self.title}"
