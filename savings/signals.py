from django.contrib.auth import get_user_model
from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from .services import build_savings_target_rule

User = get_user_model()


@receiver(pre_save, sender=User)
def track_savings_category_change(sender, instance, raw=False, **kwargs):
    """
    Remember whether this save changes the stored savings category.
    """
    if raw or instance.pk is None:
        instance._savings_category_changed = False
        return

    stored = (
        sender.objects.filter(pk=instance.pk)
        .values_list("savings_category", flat=True)
        .first()
    )
    instance._savings_category_changed = stored != instance.savings_category


@receiver(post_save, sender=User)
def sync_savings_target(sender, instance, created, raw=False, update_fields=None, **kwargs):
    # Fixture loads (loaddata) save rows as-is
    if created or raw:
        return

    if update_fields is not None and "savings_category" not in update_fields:
        return

    category_changed = getattr(instance, "_savings_category_changed", False)
    instance._savings_category_changed = False

    build_savings_target_rule().on_user_updated(
        instance,
        category_changed,
        instance.savings_category,
    )
