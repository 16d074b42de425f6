"""
Stored procedures run by the store against a single partition.

A procedure receives copies of every document of one partition plus the
call parameters and returns the documents it changed along with a result.
Stores write the changed documents back; procedures themselves do no I/O.
"""

from typing import Any, Callable, Dict, List, Tuple

StoredDocument = Dict[str, Any]
ProcedureOutcome = Tuple[List[StoredDocument], Any]
StoredProcedure = Callable[[List[StoredDocument], List[Any]], ProcedureOutcome]

UPDATE_USERNAME = "updateUsername"

# Embedded lists of {"username", "userId"} pairs
_USERNAME_PAIR_FIELDS = ("teamMembers", "usersRequestingToJoin")


def update_username(
    documents: List[StoredDocument], params: List[Any]
) -> ProcedureOutcome:
    """Rewrite every denormalized copy of a user's username.

    Params are ``[user_id, new_username]``. Re-running it on the same
    partition changes nothing, so it is safe to retry.

    Returns:
        Changed documents and the number of documents changed
    """
    user_id, new_username = params
    changed: List[StoredDocument] = []
    for document in documents:
        modified = False
        if (
            document.get("authorId") == user_id
            and document.get("authorUsername") != new_username
        ):
            document["authorUsername"] = new_username
            modified = True
        for field_name in _USERNAME_PAIR_FIELDS:
            for pair in document.get(field_name) or []:
                if (
                    pair.get("userId") == user_id
                    and pair.get("username") != new_username
                ):
                    pair["username"] = new_username
                    modified = True
        if modified:
            changed.append(document)
    return changed, len(changed)


DEFAULT_PROCEDURES: Dict[str, StoredProcedure] = {
    UPDATE_USERNAME: update_username,
}
