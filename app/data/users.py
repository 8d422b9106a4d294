from __future__ import annotations

from typing import Optional


GET_USERS_WITH_EMAILS = "get-users-with-emails"


def _find_couple(profile_id: str, couples: list[dict]) -> Optional[dict]:
    for c in couples:
        if c.get("user1_id") == profile_id or c.get("user2_id") == profile_id:
            return c
    return None


def merge_users_with_emails(profiles: list[dict], couples: list[dict], auth_users: list[dict]) -> list[dict]:
    """
    Profile rows + auth e-mail + couple linkage, in profile order.

    - `email` is "N/A" when no auth account matches the profile id
    - `partner_id` is the other member of the first couple containing the profile
    """
    emails = {u.get("id"): u.get("email") for u in auth_users}

    merged = []
    for profile in profiles:
        pid = profile.get("id")
        couple = _find_couple(pid, couples)
        if couple is None:
            partner_id = None
        elif couple.get("user1_id") == pid:
            partner_id = couple.get("user2_id")
        else:
            partner_id = couple.get("user1_id")

        merged.append(
            {
                **profile,
                "email": emails.get(pid) or "N/A",
                "couple_id": couple.get("id") if couple else None,
                "partner_id": partner_id,
                "couple_status": couple.get("status") if couple else None,
            }
        )
    return merged
