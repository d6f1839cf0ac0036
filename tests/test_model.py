from admin_panel import model


def test_add_model(not_app_db):

    admin = model.User(email="admin@example.com", user_type=model.UserTypeEnum.ADMIN)
    not_app_db.add(admin)
    not_app_db.flush()
    blog = model.Blog(title="First", added_by=admin.id)
    not_app_db.add(blog)
    not_app_db.commit()

    user = not_app_db.query(model.User).one()
    assert user.user_type is model.UserTypeEnum.ADMIN
    assert user.is_deleted is False
    assert user.is_active is True
    assert user.created_at is not None
    assert not_app_db.query(model.Blog).one().added_by == user.id


def test_models_registry():
    assert set(model.MODELS) == {
        "user", "user_auth_settings", "user_token", "role",
        "project_route", "route_role", "user_role", "blog"
    }
    assert model.MODELS["route_role"] is model.RouteRole
