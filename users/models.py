# ===========================================================
# users/models.py
# ===========================================================

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin, BaseUserManager
from django.db import models
from django.core.validators import RegexValidator
from django.core.exceptions import ValidationError
from django.utils.crypto import get_random_string
import logging

logger = logging.getLogger("users")


# ===========================================================
# USER MANAGER
# ===========================================================
class UserManager(BaseUserManager):
    """Custom user manager keyed on university_id."""

    def create_user(self, university_id, email=None, password=None, **extra_fields):
        """Create a regular user. A random password is generated when none is given."""
        if not university_id:
            raise ValueError("Users must have a university_id.")

        email = self.normalize_email(email) if email else None
        if not email:
            raise ValueError("Users must have an email.")

        if not password:
            password = get_random_string(length=12)

        extra_fields.setdefault("is_active", True)

        user = self.model(university_id=university_id.strip(), email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)

        logger.info(
            f"User created: {user.university_id} ({user.role})",
            extra={"university_id": user.university_id, "role": user.role},
        )
        return user

    def create_superuser(self, university_id, email=None, password=None, **extra_fields):
        """Create and save a superuser."""
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", User.ROLE_SYSTEM_ADMIN)

        if not password:
            raise ValueError("Superuser must have a password.")

        return self.create_user(university_id, email=email, password=password, **extra_fields)


# ===========================================================
# USER MODEL
# ===========================================================
class User(AbstractBaseUser, PermissionsMixin):
    """
    Account for every portal user: students, faculty,
    department admins and system admins.

    Academic fields are role-specific; a student's ``section`` is
    stored as entered and is never rewritten by feedback matching.
    """

    ROLE_STUDENT = "student"
    ROLE_FACULTY = "faculty"
    ROLE_DEPARTMENT_ADMIN = "department_admin"
    ROLE_SYSTEM_ADMIN = "system_admin"

    ROLE_CHOICES = [
        (ROLE_STUDENT, "Student"),
        (ROLE_FACULTY, "Faculty"),
        (ROLE_DEPARTMENT_ADMIN, "Department Admin"),
        (ROLE_SYSTEM_ADMIN, "System Admin"),
    ]

    # ---------- CORE ----------
    university_id = models.CharField(
        max_length=50,
        unique=True,
        db_index=True,
        help_text="Registration / staff number used to log in.",
    )
    email = models.EmailField(unique=True, db_index=True)
    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)

    role = models.CharField(
        max_length=20,
        choices=ROLE_CHOICES,
        default=ROLE_STUDENT,
        db_index=True,
    )

    # ---------- CONTACT ----------
    phone = models.CharField(
        max_length=15,
        null=True,
        blank=True,
        validators=[RegexValidator(r"^\+?\d{7,15}$", "Enter a valid phone number.")],
    )

    # ---------- ACADEMIC (students) ----------
    department = models.CharField(max_length=100, blank=True, db_index=True)
    program = models.CharField(max_length=50, blank=True)
    semester = models.PositiveSmallIntegerField(null=True, blank=True)
    section = models.CharField(
        max_length=10,
        blank=True,
        help_text="Class section, canonically year + letter (e.g. 2B).",
    )
    roll_number = models.CharField(max_length=50, blank=True)

    # ---------- ACADEMIC (staff) ----------
    designation = models.CharField(max_length=100, blank=True)
    managed_department = models.CharField(max_length=100, blank=True)

    # ---------- DJANGO FLAGS ----------
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    # ---------- AUDIT ----------
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "university_id"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = ["email"]

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"
        ordering = ["university_id"]
        indexes = [
            models.Index(fields=["role", "is_active"]),
            models.Index(fields=["role", "section"]),
        ]

    def __str__(self):
        full = self.get_full_name()
        return f"{full} ({self.university_id})" if full else self.university_id

    # ======================================================
    # BASIC METHODS
    # ======================================================
    def get_full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def get_short_name(self):
        return self.first_name or self.university_id

    # ======================================================
    # VALIDATION
    # ======================================================
    def clean(self):
        super().clean()
        if self.role == self.ROLE_DEPARTMENT_ADMIN and not (self.managed_department or self.department):
            raise ValidationError({
                "managed_department": "Department admins must manage a department."
            })

    # ======================================================
    # ROLE HELPERS
    # ======================================================
    @property
    def status(self):
        return "Active" if self.is_active else "Inactive"

    def is_student(self):
        return self.role == self.ROLE_STUDENT

    def is_faculty(self):
        return self.role == self.ROLE_FACULTY

    def is_department_admin(self):
        return self.role == self.ROLE_DEPARTMENT_ADMIN

    def is_system_admin(self):
        return self.role == self.ROLE_SYSTEM_ADMIN or self.is_superuser

    def is_admin(self):
        """Department or system admin."""
        return self.is_department_admin() or self.is_system_admin()
