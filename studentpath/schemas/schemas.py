"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.

Request bodies use camelCase on the wire (firstName, collegeToken, ...).
Required fields are declared Optional and checked inside the route so a
missing field answers 400 with a readable message instead of a 422.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model accepting both camelCase and snake_case keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    college = "college"
    professional = "professional"


class TrackType(str, Enum):
    placement = "placement"
    higher_studies = "higher-studies"


class Difficulty(str, Enum):
    easy = "easy"
    medium = "medium"
    hard = "hard"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class AuthUser(BaseModel):
    id: int
    role: UserRole
    email: str
    name: str
    college_id: Optional[int] = None
    logo_url: Optional[str] = None


class StudentRegisterRequest(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    country: Optional[str] = None
    college_token: Optional[str] = None
    college: Optional[str] = None
    program: Optional[str] = None
    department: Optional[str] = None
    current_year: Optional[int] = None
    current_semester: Optional[int] = None
    enrollment_year: Optional[int] = None
    current_gpa: Optional[float] = Field(None, alias="currentGPA")
    academic_interests: Optional[List[str]] = None
    career_quiz_answers: Optional[Dict[str, Any]] = None
    technical_skills: Optional[Dict[str, Any]] = None
    soft_skills: Optional[Dict[str, Any]] = None
    language_skills: Optional[Dict[str, Any]] = None
    primary_goal: Optional[str] = None
    secondary_goal: Optional[str] = None
    timeline: Optional[str] = None
    location_preference: Optional[str] = None
    industry_focus: Optional[List[str]] = None
    intensity_level: Optional[str] = None


class CollegeRegisterRequest(CamelModel):
    college_name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    phone: Optional[str] = None
    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None
    established_year: Optional[int] = None
    college_type: Optional[str] = None
    accreditation: Optional[str] = None
    college_token: Optional[str] = None
    contact_person: Optional[str] = None
    contact_person_email: Optional[str] = None
    contact_person_phone: Optional[str] = None
    total_students: Optional[int] = None
    programs: Optional[List[str]] = None


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None
    college_token: Optional[str] = None


class CompleteProfileRequest(CamelModel):
    student_id: Optional[int] = Field(None, alias="student_id")
    program: Optional[str] = None
    current_year: Optional[int] = None
    current_semester: Optional[int] = None
    enrollment_year: Optional[int] = None
    current_gpa: Optional[float] = Field(None, alias="currentGPA")
    academic_interests: Optional[List[str]] = None
    career_quiz_answers: Optional[Dict[str, Any]] = None
    technical_skills: Optional[Dict[str, Any]] = None
    soft_skills: Optional[Dict[str, Any]] = None
    language_skills: Optional[Dict[str, Any]] = None
    primary_goal: Optional[str] = None
    secondary_goal: Optional[str] = None
    timeline: Optional[str] = None
    location_preference: Optional[str] = None
    industry_focus: Optional[List[str]] = None
    intensity_level: Optional[str] = None


class ForgotPasswordRequest(CamelModel):
    email: Optional[str] = None
    user_type: Optional[str] = None


class ResetPasswordRequest(CamelModel):
    token: Optional[str] = None
    new_password: Optional[str] = None
    user_type: Optional[str] = None


# ============================================================
# PROFESSIONAL SCHEMAS
# ============================================================

class ProfessionalRegisterRequest(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    designation: Optional[str] = None
    industry: Optional[str] = None
    experience: Optional[str] = None
    current_salary: Optional[str] = None
    expected_salary: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    portfolio: Optional[str] = None
    skills: Optional[List[str]] = None
    certifications: Optional[str] = None
    career_goals: Optional[str] = None
    preferred_learning_style: Optional[str] = None


class ProfessionalUpdateRequest(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    designation: Optional[str] = None
    industry: Optional[str] = None
    experience: Optional[str] = None
    current_salary: Optional[str] = None
    expected_salary: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    portfolio: Optional[str] = None
    skills: Optional[List[str]] = None
    certifications: Optional[str] = None
    career_goals: Optional[str] = None
    preferred_learning_style: Optional[str] = None


# ============================================================
# SETTINGS SCHEMAS
# ============================================================

class NotificationSettings(CamelModel):
    email_notifications: bool = True
    push_notifications: bool = True
    assignment_reminders: bool = True
    goal_updates: bool = True
    weekly_reports: bool = False
    course_updates: bool = True


class PrivacySettings(CamelModel):
    profile_visibility: bool = True
    progress_sharing: bool = False
    analytics_opt_in: bool = True


class PreferenceSettings(CamelModel):
    theme: str = "system"
    language: str = "en"
    timezone: str = "Asia/Kolkata"


class StudentProfileUpdate(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    country: Optional[str] = None
    program: Optional[str] = None
    department: Optional[str] = None
    current_year: Optional[int] = None
    current_semester: Optional[int] = None
    current_gpa: Optional[float] = Field(None, alias="currentGPA")
    primary_goal: Optional[str] = None
    secondary_goal: Optional[str] = None
    timeline: Optional[str] = None
    location_preference: Optional[str] = None
    intensity_level: Optional[str] = None


class SettingsUpdateRequest(CamelModel):
    profile: Optional[StudentProfileUpdate] = None
    notifications: Optional[NotificationSettings] = None
    privacy: Optional[PrivacySettings] = None
    preferences: Optional[PreferenceSettings] = None


class DeleteAccountRequest(CamelModel):
    confirm_email: Optional[str] = None


class CollegeSettingsUpdate(BaseModel):
    college_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None
    established_year: Optional[int] = None
    college_type: Optional[str] = None
    accreditation: Optional[str] = None
    contact_person: Optional[str] = None
    contact_person_email: Optional[str] = None
    contact_person_phone: Optional[str] = None
    total_students: Optional[int] = None
    programs: Optional[List[str]] = None


# ============================================================
# CAREER TRACK SCHEMAS
# ============================================================

class ReviewCreate(CamelModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = None
    is_anonymous: bool = False
    interview_date: Optional[str] = None
    offer_received: Optional[bool] = None
    salary_offered: Optional[str] = None
    interview_experience: Optional[str] = None
    questions_asked: Optional[str] = None
    preparation_tips: Optional[str] = None
    overall_experience: Optional[str] = None
    would_recommend: Optional[bool] = None
    rounds_cleared: Optional[int] = None


class GeneratePlanRequest(CamelModel):
    track_type: Optional[str] = None
    target_id: Optional[str] = None
    target_name: Optional[str] = None
    required_skills: Optional[List[str]] = None
    student_skills: Optional[Dict[str, int]] = None
    semester: int = 6
    time_remaining_weeks: int = 12
    additional_context: Optional[str] = None


class AddPlanRequest(CamelModel):
    target_id: Optional[str] = None
    target_name: Optional[str] = None
    track_type: Optional[TrackType] = None
    difficulty: Optional[Difficulty] = None
    milestones: Optional[List[Dict[str, Any]]] = None


class CompleteTaskRequest(CamelModel):
    task_id: Optional[int] = None
    plan_id: Optional[int] = None


# ============================================================
# RESUME SCHEMAS
# ============================================================

class AnalyzeResumeRequest(CamelModel):
    resume_id: Optional[int] = None
    company_id: Optional[str] = None
    company_name: Optional[str] = None
    target_role: Optional[str] = None


# ============================================================
# CHAT SCHEMAS
# ============================================================

class ChatRequest(CamelModel):
    message: Optional[str] = None
    conversation_id: Optional[int] = None


class ConversationCreate(CamelModel):
    title: Optional[str] = None


class ConversationUpdate(CamelModel):
    title: Optional[str] = None
    is_archived: Optional[bool] = None


class ChatContextUpdate(CamelModel):
    context_data: Dict[str, Any] = Field(default_factory=dict)


# ============================================================
# COMMON
# ============================================================

class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    detail: Union[str, Dict[str, Any]]
