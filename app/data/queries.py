"""Select strings (PostgREST embedding syntax) used by the screens."""

from __future__ import annotations


COUPLES_WITH_PROFILES = """
  *,
  user1_profile:profiles!couples_user1_id_fkey(name),
  user2_profile:profiles!couples_user2_id_fkey(name)
"""

QUIZZES_WITH_THEME = "*, quiz_themes(*)"

QUIZ_QUESTIONS_WITH_QUIZ = """
  *,
  quizzes (
    *,
    quiz_themes (*)
  )
"""

DAILY_QUESTIONS_WITH_DETAILS = """
  *,
  questions (*),
  couples (
    *,
    user1:profiles!couples_user1_id_fkey (*),
    user2:profiles!couples_user2_id_fkey (*)
  )
"""

COUPLES_WITH_MEMBERS = """
  *,
  user1:profiles!couples_user1_id_fkey (*),
  user2:profiles!couples_user2_id_fkey (*)
"""

SUBCATEGORIES_WITH_CATEGORY = """
  *,
  service_categories (
    id,
    name,
    icon
  )
"""

CATEGORY_OPTIONS = "id, name, icon"

PROVIDERS_WITH_DIRECTORY = """
  *,
  service_subcategories (
    id,
    name,
    icon,
    service_categories (
      id,
      name,
      icon
    )
  )
"""

SUBCATEGORY_OPTIONS = """
  id,
  name,
  icon,
  service_categories!inner (
    id,
    name,
    icon
  )
"""

SERVICE_STATS_WITH_DIRECTORY = """
  service_provider_id,
  user_id,
  accessed_at,
  service_providers!inner (
    id,
    name,
    service_subcategories!inner (
      name,
      service_categories!inner (
        name
      )
    )
  )
"""

PROVIDER_CATEGORIES = """
  service_subcategories!inner (
    service_categories!inner (
      name
    )
  )
"""
