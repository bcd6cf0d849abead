def serialize_user(user) -> dict:
    """Public view of an account; never includes password or refresh token"""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "role": user.role,
        "status": user.status,
        "profile_picture": user.profile_picture,
        "address": user.address,
        "date_of_birth": user.date_of_birth,
        "gender": user.gender,
        "created_at": user.created_at,
    }


def serialize_doctor(doctor) -> dict:
    return {
        "id": doctor.id,
        "user": {
            "id": doctor.user.id,
            "name": doctor.user.name,
            "email": doctor.user.email,
            "profile_picture": doctor.user.profile_picture,
        },
        "specialization": doctor.specialization,
        "qualification": doctor.qualification,
        "experience": doctor.experience,
        "availability": doctor.availability,
        "bio": doctor.bio,
        "image": doctor.image,
        "consultation_fee": float(doctor.consultation_fee),
        "rating": float(doctor.rating),
        "total_reviews": doctor.total_reviews,
        "is_active": doctor.is_active,
        "approved_at": doctor.approved_at,
    }


def serialize_registration_request(application) -> dict:
    return {
        "id": application.id,
        "user": {
            "id": application.user.id,
            "name": application.user.name,
            "email": application.user.email,
            "phone": application.user.phone,
        },
        "specialization": application.specialization,
        "qualification": application.qualification,
        "experience": application.experience,
        "bio": application.bio,
        "status": application.status,
        "rejection_reason": application.rejection_reason,
        "created_at": application.created_at,
    }
