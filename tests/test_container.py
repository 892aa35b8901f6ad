def test_services_share_one_workplace_service(services):
    assert services.attendance_service._bindings is services.workplace_service
    assert services.report_service._bindings is services.workplace_service


def test_binding_made_through_container_is_seen_by_attendance(services, fixed_now):
    services.workplace_service.subscribe(team_id="T1", channel_id="C1", user_id="U1", workplace_name="Cafe", now=fixed_now)

    log = services.attendance_service.check_in(team_id="T1", channel_id="C1", user_id="U1", now=fixed_now)

    assert log.workplace_name == "Cafe"
