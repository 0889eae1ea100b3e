"""
Department topology for the production chain.

Pure functions over a static role graph. No Django model lifecycle is involved,
so these are used by the services AND tests directly.

The chain is linear with limited branching: printing, embroidery and sewing
fan out to an in-house and an outsourced department, and both converge on the
same next stage. Outsourced variants follow the topology of their in-house
equivalent but keep their own role value for accounting.
"""

from .choices import DepartmentRole
from .exceptions import UnknownDepartmentRole


R = DepartmentRole

INITIAL_ROLE = R.CUTTING
TERMINAL_ROLE = R.WAREHOUSE

# In-house role -> ordered list of legal next roles
DEPARTMENT_FLOW: dict[DepartmentRole, list[DepartmentRole]] = {
    R.CUTTING: [R.SORTING],
    R.SORTING: [R.PRINTING, R.PRINTING_OUTSOURCED],
    R.PRINTING: [R.EMBROIDERY, R.EMBROIDERY_OUTSOURCED],
    R.EMBROIDERY: [R.SEWING, R.SEWING_OUTSOURCED],
    R.SEWING: [R.CLEANING],
    R.CLEANING: [R.QUALITY_CONTROL],
    R.QUALITY_CONTROL: [R.IRONING],
    R.IRONING: [R.PACKING],
    R.PACKING: [R.WAREHOUSE],
    R.WAREHOUSE: [],
}

# Outsourced variant -> in-house equivalent
OUTSOURCED_VARIANTS: dict[DepartmentRole, DepartmentRole] = {
    R.PRINTING_OUTSOURCED: R.PRINTING,
    R.EMBROIDERY_OUTSOURCED: R.EMBROIDERY,
    R.SEWING_OUTSOURCED: R.SEWING,
}

DEFAULT_ROLE_ALIASES: dict[str, str] = {
    "autsorspechat": R.PRINTING.value,
    "autsorstikuv": R.SEWING.value,
    "pechatusluga": R.PRINTING_OUTSOURCED.value,
    "vishivkausluga": R.EMBROIDERY_OUTSOURCED.value,
    "tikuvusluga": R.SEWING_OUTSOURCED.value,
}


def resolve_role(name, aliases: dict[str, str] = None) -> DepartmentRole:
    """
    Resolve a department name or role key to its canonical role.

    Matching is case-insensitive. The alias table is applied before lookup.

    Args:
        name: Department name, role value, or DepartmentRole
        aliases: Extra alias -> role value entries. When None, the
            PACKFLOW_ROLE_ALIASES setting is used.

    Returns:
        The canonical DepartmentRole

    Raises:
        UnknownDepartmentRole: If the name resolves to no known role
    """
    if isinstance(name, DepartmentRole):
        return name
    if name is None:
        raise UnknownDepartmentRole("")

    if aliases is None:
        from .conf import get_role_aliases
        aliases = get_role_aliases()

    key = str(name).strip().lower()
    table = {**DEFAULT_ROLE_ALIASES, **aliases}
    key = table.get(key, key)

    try:
        return DepartmentRole(key)
    except ValueError:
        raise UnknownDepartmentRole(str(name))


def topology_role(role) -> DepartmentRole:
    """Map an outsourced variant to the in-house role it stands in for."""
    role = resolve_role(role)
    return OUTSOURCED_VARIANTS.get(role, role)


def next_roles(role) -> list[DepartmentRole]:
    """
    Ordered list of roles legally reachable from role.

    An empty list means role is terminal.
    """
    return list(DEPARTMENT_FLOW[topology_role(role)])


def is_terminal(role) -> bool:
    """Check if role ends the flow."""
    return topology_role(role) == TERMINAL_ROLE


def is_transition_allowed(from_role, to_role) -> bool:
    """Check if a send from from_role to to_role follows the topology."""
    return resolve_role(to_role) in next_roles(from_role)


def stage_index(role) -> int:
    """
    1-based position of role along the chain.

    Outsourced variants share the stage of their in-house equivalent.
    """
    target = topology_role(role)
    stage = 1
    current = INITIAL_ROLE
    while current != target:
        candidates = [r for r in DEPARTMENT_FLOW[current] if r not in OUTSOURCED_VARIANTS]
        if not candidates:
            raise UnknownDepartmentRole(str(role))
        current = candidates[0]
        stage += 1
    return stage


def ordered_roles() -> list[DepartmentRole]:
    """All roles sorted by stage, in-house before outsourced within a stage."""
    return sorted(
        DepartmentRole,
        key=lambda r: (stage_index(r), r in OUTSOURCED_VARIANTS),
    )


def validate_topology(
    flow: dict[DepartmentRole, list[DepartmentRole]],
    initial_role: DepartmentRole,
    terminal_role: DepartmentRole,
) -> list[str]:
    """
    Validate the role graph is sane and usable.

    Returns list of error messages (empty = valid).

    Checks:
    - every source and target is a known role
    - terminal role has no outgoing transitions
    - every in-house role is reachable from initial_role
    - terminal role is reachable
    """
    errors = []
    known = set(DepartmentRole)

    for from_role, to_roles in flow.items():
        if from_role not in known:
            errors.append(f"transition from unknown role '{from_role}'")
        for to_role in to_roles:
            if to_role not in known:
                errors.append(f"transition to unknown role '{to_role}'")

    if flow.get(terminal_role):
        errors.append(f"terminal role '{terminal_role}' has outgoing transitions")

    reachable = _find_reachable_roles(initial_role, flow)
    for role in flow:
        if role not in reachable:
            errors.append(f"role '{role}' unreachable from initial role")
    if terminal_role not in reachable:
        errors.append(f"terminal role '{terminal_role}' unreachable from initial role")

    return errors


def _find_reachable_roles(start, flow) -> set:
    """
    BFS over the flow, following outsourced variants through their in-house edges.

    Returns:
        Set of all roles reachable from start (including start itself)
    """
    visited = {start}
    queue = [start]

    while queue:
        current = queue.pop(0)
        source = OUTSOURCED_VARIANTS.get(current, current)
        for next_role in flow.get(source, []):
            if next_role not in visited:
                visited.add(next_role)
                queue.append(next_role)

    return visited
