from tortoise import fields, models


class AIUsageLog(models.Model):
    id = fields.IntField(pk=True)
    tower_id = fields.IntField(null=True)
    student_name = fields.CharField(max_length=100, null=True)

    prompt_tokens = fields.IntField(default=0)
    response_tokens = fields.IntField(default=0)
    total_tokens = fields.IntField(default=0)
    estimated_cost = fields.FloatField(default=0)

    message = fields.TextField(null=True)
    sources_used = fields.IntField(default=0)

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "ai_usage_logs"
