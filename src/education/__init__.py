"""Education bounded context: sessions, enrollments, attendance, payments, feedback, syllabus."""
