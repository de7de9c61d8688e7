"""Account model (one per loyalty card holder).

Data architecture:
    Account.username
        Stored normalized (stripped, lower-case), which makes the unique
        constraint case-insensitive. See stampcard.utils.normalize_username.

    Account.stamps / Account.rewards
        Mutated only through the account store with F() expressions, never by
        read-modify-save, so concurrent requests cannot lose updates. Database
        check constraints keep both counters non-negative.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Account(models.Model):
    """
    Registered loyalty card holder.

    The credential is a Django password-hasher string, never the passcode.
    """

    username = models.CharField(
        _("username"),
        max_length=150,
        unique=True,
        help_text=_("Normalized (lower-case) login name"),
    )
    credential_hash = models.CharField(_("credential hash"), max_length=255)

    # Counters
    stamps = models.IntegerField(
        _("stamps"),
        default=0,
        help_text=_("Stamps on the current card"),
    )
    rewards = models.IntegerField(
        _("rewards"),
        default=0,
        help_text=_("Lifetime redemptions"),
    )

    # Audit
    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        verbose_name = _("account")
        verbose_name_plural = _("accounts")
        ordering = ["-stamps", "username"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(stamps__gte=0),
                name="stampcard_account_stamps_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(rewards__gte=0),
                name="stampcard_account_rewards_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.username}: {self.stamps} stamps | {self.rewards} rewards"

    def save(self, *args, **kwargs):
        from stampcard.utils import normalize_username

        self.username = normalize_username(self.username)
        super().save(*args, **kwargs)
