from __future__ import annotations

from hrms.models.access import MenuItem, MenuModule
from hrms.repositories.access_repository import RolePermissionRepository
from hrms.repositories.data_store import DataStore


class MenuService:
    def __init__(self, store: DataStore) -> None:
        self.store = store

    def build_menu(self, role_id: int, organization_id: int) -> list[MenuModule]:
        modules: dict[int, MenuModule] = {}
        seen: dict[int, set[int]] = {}

        with self.store.transaction() as session:
            grants = RolePermissionRepository(session).active_for_role_in_org(role_id, organization_id)
            for grant in grants:
                permission = grant.permission
                if permission is None or not permission.active or permission.is_deleted:
                    continue
                menu = permission.menu
                module = permission.module
                if menu is None or module is None or module.is_deleted:
                    continue

                entry = modules.get(module.id)
                if entry is None:
                    entry = MenuModule(id=module.id, name=module.name)
                    modules[module.id] = entry
                    seen[module.id] = set()

                if menu.id in seen[module.id]:
                    continue
                seen[module.id].add(menu.id)
                entry.sub_menu.append(
                    MenuItem(
                        id=menu.id,
                        name=menu.name,
                        font_icon=menu.font_icon or "la la-file",
                        route_url=menu.route_url or "",
                    )
                )

        tree = [m for m in modules.values() if m.sub_menu]
        tree.sort(key=lambda m: m.name.lower())
        return tree
