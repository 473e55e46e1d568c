"""
utils/constants.py

Purpose: Centralized static content

- User-facing messages for the enrollment wizard
- Plan names and feature lists
- Profile form fields and option lists
- Course image fallbacks

(Prevents hardcoding across the codebase)
"""

# ============================================================
# STEP TITLES
# ============================================================

STEP_TITLE_PROFILE = "Complete Profile"
STEP_TITLE_PLAN = "Choose Plan"
STEP_TITLE_PAYMENT = "Payment"
STEP_TITLE_CONFIRMATION = "Enrollment Complete"

# ============================================================
# PROFILE COMPLETION
# ============================================================

PROFILE_REQUIRED_FIELDS = (
    "full_name",
    "occupation",
    "profession",
    "experience",
    "goals",
    "time_commitment",
)

PROFILE_UPDATED_BACKEND_MESSAGE = "User updated successfully"

PROFESSIONS = [
    "Student",
    "Software Developer",
    "SAP Consultant",
    "ABAP Developer",
    "Business Analyst",
    "Project Manager",
    "IT Manager",
    "System Administrator",
    "Freelancer",
    "Other",
]

EXPERIENCE_LEVELS = ["0-1", "1-3", "3-5", "5-10", "10+"]

LEARNING_GOALS = [
    "Career Change",
    "Skill Upgrade",
    "Project Work",
    "Certification",
    "Personal Interest",
    "Job Promotion",
    "Freelance Opportunities",
    "Consulting Skills",
]

TIME_COMMITMENTS = ["1-5", "5-10", "10-15", "15-20", "20+"]

# ============================================================
# PAYMENT PLANS
# ============================================================

PLAN_FULL_NAME = "One-Time Payment"
PLAN_FULL_SAVINGS = "Save 15%"
PLAN_FULL_FEATURES = [
    "Full course access",
    "Lifetime updates",
    "Certificate included",
    "Priority support",
]

PLAN_INSTALLMENT_NAME = "3-Month Installment"
PLAN_INSTALLMENT_NOTE = "+10% processing fee"
PLAN_INSTALLMENT_FEATURES = [
    "Pay in 3 months",
    "Full course access",
    "Certificate included",
    "Standard support",
]

INSTALLMENT_MONTHS = 3
INSTALLMENT_MULTIPLIER = 1.1

# ============================================================
# MESSAGES
# ============================================================

MESSAGE_PROFILE_COMPLETED = "Profile completed successfully!"
MESSAGE_ENROLLMENT_COMPLETED = "Enrollment completed successfully!"
MESSAGE_SIGN_IN_REQUIRED = "Please sign in to enroll in this course."

ERROR_PROFILE_SAVE_FAILED = "Failed to save profile. Please try again."
ERROR_COURSE_ID_MISSING = "Course ID is missing. Cannot proceed with payment."
ERROR_SDK_LOAD_FAILED = "Failed to load Razorpay SDK"
ERROR_ORDER_CREATION_FAILED = "Failed to create payment order"
ERROR_PAYMENT_INIT_FAILED = "Payment initialization failed. Please try again."
ERROR_VERIFICATION_FAILED = "Payment verification failed"
ERROR_VERIFICATION_CONTACT_SUPPORT = "Payment verification failed. Please contact support."
ERROR_PAYMENT_IN_PROGRESS = "A payment is already in progress."
PAYMENT_FAILED_TEMPLATE = "Payment failed: {description}"

# ============================================================
# COURSE IMAGES
# ============================================================

SAMPLE_COURSE_IMAGES = [
    "/images/courses/abap-basic.jpg",
    "/images/courses/abap-advanced.jpg",
    "/images/courses/abap-oop.jpg",
    "/images/courses/abap-performance.jpg",
]
