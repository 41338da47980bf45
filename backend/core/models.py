from django.db import models


class AdminSetting(models.Model):
    key = models.CharField(max_length=255, unique=True)
    value = models.JSONField(blank=True, null=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'admin_settings'
        ordering = ['key']

    def __str__(self):
        return self.key

    @classmethod
    def get(cls, key, default=None):
        row = cls.objects.filter(key=key).first()
        return default if row is None else row.value

    @classmethod
    def set(cls, key, value):
        row, _ = cls.objects.update_or_create(key=key, defaults={'value': value})
        return row
