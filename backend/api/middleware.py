from backend.core.permissions import check_field_permission


def permission_middleware(next_, root, info, **args):
    """graphql-core middleware enforcing the permission table on root fields"""
    if info.path.prev is None:
        check_field_permission(info.context.principal, info.field_name)
    return next_(root, info, **args)
