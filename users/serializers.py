# ===========================================================
# users/serializers.py
# Academic Feedback Management System (AFMS)
# ===========================================================

from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from django.contrib.auth import get_user_model
from django.contrib.auth.models import update_last_login
from django.utils.crypto import get_random_string
from django.db import transaction, models
import logging

from feedback.sections import normalize_section, parse_section, year_to_semester

User = get_user_model()
logger = logging.getLogger("users")


# ===========================================================
# 1. LOGIN SERIALIZER (university_id / email)
# ===========================================================
class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Login with university_id or email in the ``university_id`` field.
    Returns JWT pair plus a user payload for the dashboard.
    """

    username_field = "university_id"

    def validate(self, attrs):
        login_input = (attrs.get("university_id") or "").strip()
        password = attrs.get("password")

        if not login_input or not password:
            raise serializers.ValidationError(
                {"detail": "Both university_id (or email) and password are required."}
            )

        user = User.objects.filter(
            models.Q(university_id__iexact=login_input) | models.Q(email__iexact=login_input)
        ).first()

        if not user or not user.check_password(password):
            raise serializers.ValidationError({"detail": "Invalid credentials."})

        if not user.is_active:
            raise serializers.ValidationError({"detail": "Account is deactivated."})

        update_last_login(None, user)

        refresh = self.get_token(user)
        return {
            "refresh": str(refresh),
            "access": str(refresh.access_token),
            "user": ProfileSerializer(user).data,
        }

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["university_id"] = user.university_id
        token["role"] = user.role
        return token


# ===========================================================
# 2. PROFILE SERIALIZER
# ===========================================================
class ProfileSerializer(serializers.ModelSerializer):
    full_name = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "university_id",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "role",
            "phone",
            "department",
            "program",
            "semester",
            "section",
            "roll_number",
            "designation",
            "managed_department",
            "status",
            "is_active",
            "last_login",
        ]
        read_only_fields = fields

    def get_full_name(self, obj):
        return obj.get_full_name()


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """Fields a user may change on their own profile."""

    class Meta:
        model = User
        fields = ["first_name", "last_name", "email", "phone"]

    def validate_email(self, value):
        qs = User.objects.filter(email__iexact=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("Email already exists.")
        return value.lower()


# ===========================================================
# 3. REGISTER SERIALIZER (Admin creates a single user)
# ===========================================================
class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, required=False, allow_blank=True, min_length=6)

    class Meta:
        model = User
        fields = [
            "id",
            "university_id",
            "email",
            "password",
            "first_name",
            "last_name",
            "role",
            "phone",
            "department",
            "program",
            "semester",
            "section",
            "roll_number",
            "designation",
            "managed_department",
        ]
        read_only_fields = ["id"]

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Email already exists.")
        return value.lower()

    def validate_section(self, value):
        return normalize_section(value)

    def validate(self, attrs):
        request = self.context.get("request")
        role = attrs.get("role", User.ROLE_STUDENT)

        # Only system admins may create other admins
        if request and role in (User.ROLE_DEPARTMENT_ADMIN, User.ROLE_SYSTEM_ADMIN):
            if not request.user.is_system_admin():
                raise serializers.ValidationError(
                    {"role": "Only a system admin can create admin accounts."}
                )

        if role == User.ROLE_STUDENT and not attrs.get("section"):
            raise serializers.ValidationError({"section": "Students must have a section."})
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        password = validated_data.pop("password", None) or None
        university_id = validated_data.pop("university_id")
        return User.objects.create_user(university_id, password=password, **validated_data)


# ===========================================================
# 4. BULK IMPORT ROW SERIALIZERS
# ===========================================================
def split_name(name):
    """Split a full name into first and last; a single word fills both."""
    parts = name.split()
    first_name = parts[0] if parts else ""
    return first_name, " ".join(parts[1:]) or first_name


def ensure_new_user(email, university_id):
    if User.objects.filter(
        models.Q(email__iexact=email) | models.Q(university_id__iexact=university_id)
    ).exists():
        raise serializers.ValidationError("User already exists.")


class BulkStudentRowSerializer(serializers.Serializer):
    """One spreadsheet row of the student import."""

    reg_id = serializers.CharField(max_length=50)
    name = serializers.CharField(max_length=200)
    email = serializers.EmailField()
    department = serializers.CharField(max_length=100, required=False, allow_blank=True)
    section = serializers.CharField(max_length=10)
    mobile_number = serializers.CharField(max_length=15, required=False, allow_blank=True, allow_null=True)

    def validate_section(self, value):
        if parse_section(value) is None:
            raise serializers.ValidationError("Invalid section format. Use format: 1A, 2B, 3C, 4D")
        return normalize_section(value)

    def validate(self, attrs):
        ensure_new_user(attrs["email"], attrs["reg_id"])
        return attrs

    def create(self, validated_data):
        year, _letter = parse_section(validated_data["section"])
        first_name, last_name = split_name(validated_data["name"])

        return User.objects.create_user(
            validated_data["reg_id"],
            email=validated_data["email"],
            # reg id doubles as the initial password
            password=validated_data["reg_id"],
            role=User.ROLE_STUDENT,
            first_name=first_name,
            last_name=last_name,
            phone=validated_data.get("mobile_number") or None,
            department=validated_data.get("department", ""),
            program="B.Tech",
            semester=year_to_semester(year),
            section=validated_data["section"],
            roll_number=validated_data["reg_id"],
        )


class BulkFacultyRowSerializer(serializers.Serializer):
    """
    One row of the faculty import. The mobile number is the initial password.
    Course columns are accepted for the same spreadsheet but not stored on the
    user; forms carry their own course and sections.
    """

    faculty_id = serializers.CharField(max_length=50)
    name = serializers.CharField(max_length=200)
    email = serializers.EmailField()
    department = serializers.CharField(max_length=100, required=False, allow_blank=True)
    designation = serializers.CharField(max_length=100, required=False, allow_blank=True)
    mobile_number = serializers.RegexField(r"^\+?\d{7,15}$", max_length=15)
    course_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    course_code = serializers.CharField(max_length=50, required=False, allow_blank=True)
    section = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        ensure_new_user(attrs["email"], attrs["faculty_id"])
        return attrs

    def create(self, validated_data):
        first_name, last_name = split_name(validated_data["name"])
        return User.objects.create_user(
            validated_data["faculty_id"],
            email=validated_data["email"],
            password=validated_data["mobile_number"],
            role=User.ROLE_FACULTY,
            first_name=first_name,
            last_name=last_name,
            phone=validated_data["mobile_number"],
            department=validated_data.get("department") or "General",
            designation=validated_data.get("designation", ""),
        )


class BulkDeptAdminRowSerializer(serializers.Serializer):
    """One row of the department admin import; ``dept_id`` is generated when blank."""

    dept_id = serializers.CharField(max_length=50, required=False, allow_blank=True)
    name = serializers.CharField(max_length=200)
    email = serializers.EmailField()
    department = serializers.CharField(max_length=100)
    mobile_number = serializers.RegexField(r"^\+?\d{7,15}$", max_length=15)

    def validate(self, attrs):
        if not attrs.get("dept_id"):
            attrs["dept_id"] = f"DEPT{get_random_string(8, allowed_chars='0123456789')}"
        ensure_new_user(attrs["email"], attrs["dept_id"])
        return attrs

    def create(self, validated_data):
        first_name, last_name = split_name(validated_data["name"])
        return User.objects.create_user(
            validated_data["dept_id"],
            email=validated_data["email"],
            password=validated_data["mobile_number"],
            role=User.ROLE_DEPARTMENT_ADMIN,
            first_name=first_name,
            last_name=last_name,
            phone=validated_data["mobile_number"],
            department=validated_data["department"],
            managed_department=validated_data["department"],
        )


# ===========================================================
# 5. CHANGE PASSWORD SERIALIZER
# ===========================================================
class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True, required=True)
    new_password = serializers.CharField(write_only=True, required=True)

    def validate_current_password(self, value):
        user = self.context["request"].user
        if not user.check_password(value):
            raise serializers.ValidationError("Current password is incorrect.")
        return value

    def validate_new_password(self, value):
        if len(value) < 6:
            raise serializers.ValidationError("New password must be at least 6 characters long.")
        return value

    def save(self, **kwargs):
        user = self.context["request"].user
        user.set_password(self.validated_data["new_password"])
        user.save(update_fields=["password"])
        logger.info(f"Password changed for {user.university_id}")
        return {"message": "Password updated successfully."}
