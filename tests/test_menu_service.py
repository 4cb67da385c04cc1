from hrms.core.rbac import SystemRole


def test_role_without_grants_has_empty_menu(container):
    assert container.menu_service.build_menu(int(SystemRole.SALES), 1) == []


def test_single_grant_gives_single_item(container, super_admin):
    container.permission_service.sync_role_permissions(int(SystemRole.SALES), [6], super_admin)

    menu = container.menu_service.build_menu(int(SystemRole.SALES), 1)

    assert len(menu) == 1
    assert menu[0].name == "Access Control"
    assert [item.name for item in menu[0].sub_menu] == ["Access Control"]


def test_menu_items_are_deduplicated_and_modules_sorted(container, super_admin):
    # view_leave, approve_leave and reject_leave all sit on "Leave Requests"
    container.permission_service.sync_role_permissions(int(SystemRole.SALES), [13, 1, 3, 4, 2], super_admin)

    menu = container.menu_service.build_menu(int(SystemRole.SALES), 1)

    assert [module.name for module in menu] == ["Leave Management", "Reports"]
    assert [item.name for item in menu[0].sub_menu] == ["Leave Requests", "My Leave"]


def test_menu_respects_organization(container):
    assert container.menu_service.build_menu(int(SystemRole.EMPLOYEE), 2) == []
    assert [m.name for m in container.menu_service.build_menu(int(SystemRole.EMPLOYEE), 1)] == [
        "Dashboard",
        "Leave Management",
    ]
