from tortoise import fields, models


class Profile(models.Model):
    id = fields.IntField(pk=True)
    email = fields.CharField(max_length=255, unique=True)
    full_name = fields.CharField(max_length=255, null=True)

    # teacher | school_admin | district_admin | super_admin
    role = fields.CharField(max_length=30, default="teacher")

    is_active = fields.BooleanField(default=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "profiles"

    def __str__(self):
        return f"{self.email} ({self.role})"

    def can_manage_tower(self, tower) -> bool:
        """Admins see every tower, teachers only their own."""
        if self.role in ["school_admin", "district_admin", "super_admin"]:
            return True
        return tower.teacher_id == self.id

    def can_manage_classroom(self, classroom) -> bool:
        if self.role in ["school_admin", "district_admin", "super_admin"]:
            return True
        return classroom.teacher_id == self.id
