from sqladmin import ModelView

from app.user.models import AlumniProfile, User


class UserAdmin(ModelView, model=User):
    name = "User"
    name_plural = "Users"

    column_list = [
        User.email,
        User.name,
        User.role,
        User.auth_method,
        User.email_verified,
        User.id,
        User.created_at,
        User.deleted_at,
    ]

    column_searchable_list = [User.email, User.name]

    column_sortable_list = [
        User.email,
        User.name,
        User.role,
        User.created_at,
        User.deleted_at,
    ]

    # Credentials and single-use tokens never leave the database
    column_details_exclude_list = [
        User.password_hash,
        User.verification_token,
        User.reset_token,
    ]
    form_excluded_columns = [
        User.password_hash,
        User.google_id,
        User.verification_token,
        User.verification_token_expires_at,
        User.reset_token,
        User.reset_token_expires_at,
        User.created_at,
        User.updated_at,
        User.profile,
    ]

    can_delete = False


class AlumniProfileAdmin(ModelView, model=AlumniProfile):
    name = "Alumni Profile"
    name_plural = "Alumni Profiles"

    column_list = [
        AlumniProfile.full_name,
        AlumniProfile.department,
        AlumniProfile.class_year,
        AlumniProfile.industry,
        AlumniProfile.company_name,
        AlumniProfile.user_id,
    ]

    column_searchable_list = [
        AlumniProfile.full_name,
        AlumniProfile.student_id,
        AlumniProfile.company_name,
    ]

    column_sortable_list = [
        AlumniProfile.full_name,
        AlumniProfile.department,
        AlumniProfile.class_year,
    ]

    form_excluded_columns = [
        AlumniProfile.user,
        AlumniProfile.created_at,
        AlumniProfile.updated_at,
    ]

    can_create = False
    can_delete = False
