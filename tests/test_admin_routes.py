"""HTTP tests for administrator management and admin credential flows."""


class TestAdminCrud:
    def test_list_admins(self, client, admin_headers, make_admin):
        make_admin(email="second@lifts.test")
        resp = client.get('/api/admins', headers=admin_headers)
        assert resp.status_code == 200
        emails = {a["email"] for a in resp.get_json()}
        assert emails == {"boss@lifts.test", "second@lifts.test"}

    def test_create_records_creator(self, client, admin_headers, admin):
        resp = client.post('/api/admins', headers=admin_headers, json={
            "name": "Ann", "email": "a@x.com", "password": "secret123", "phone": "555-1234",
        })
        created = resp.get_json()["admin"]
        assert created["createdBy"]["id"] == admin["id"]
        assert created["phone"] == "555-1234"

    def test_create_duplicate_email(self, client, admin_headers, sender):
        resp = client.post('/api/admins', headers=admin_headers, json={
            "name": "Dup", "email": "boss@lifts.test", "password": "secret123",
        })
        assert resp.status_code == 409
        assert resp.get_json()["error"] == "Email already exists"
        assert sender.sent == []

    def test_create_short_password(self, client, admin_headers):
        resp = client.post('/api/admins', headers=admin_headers, json={
            "name": "Ann", "email": "a@x.com", "password": "short",
        })
        assert resp.status_code == 400
        assert resp.get_json()["details"][0]["field"] == "password"

    def test_create_name_too_long(self, client, admin_headers):
        resp = client.post('/api/admins', headers=admin_headers, json={
            "name": "x" * 31, "email": "a@x.com", "password": "secret123",
        })
        assert resp.status_code == 400

    def test_update_own_profile(self, client, admin_headers, admin):
        resp = client.put('/api/admins', headers=admin_headers, json={"name": "Big Boss"})
        assert resp.status_code == 200
        assert resp.get_json()["admin"]["name"] == "Big Boss"
        assert resp.get_json()["admin"]["emailConfirmed"] is True

    def test_me(self, client, admin_headers, admin):
        resp = client.get('/api/admins/me', headers=admin_headers)
        assert resp.get_json()["id"] == admin["id"]

    def test_get_by_id(self, client, admin_headers, make_admin):
        other = make_admin()
        resp = client.get(f"/api/admins/{other['id']}", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.get_json()["email"] == other["email"]

    def test_get_missing(self, client, admin_headers):
        resp = client.get('/api/admins/does-not-exist', headers=admin_headers)
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "Admin not found"

    def test_delete_other(self, client, admin_headers, make_admin, admin_realm):
        other = make_admin()
        resp = client.delete(f"/api/admins/{other['id']}", headers=admin_headers)
        assert resp.status_code == 200
        assert admin_realm.store.find_by_email(other["email"]) is None

    def test_delete_me(self, client, admin_headers, admin, admin_realm):
        resp = client.delete('/api/admins/me', headers=admin_headers)
        assert resp.status_code == 200
        assert admin_realm.store.find_by_email(admin["email"]) is None


class TestAdminCredentialFlows:
    def test_forgot_password_then_reset_with_emailed_token(self, client, admin, sender, token_from_email):
        resp = client.post('/api/admins/forgetpswd', json={"email": admin["email"]})
        assert resp.status_code == 200

        reset_token = token_from_email(sender.last_to(admin["email"]), "token=")
        resp = client.put('/api/admins/password', json={"password": "brandnew99"},
                          headers={"Authorization": f"Bearer {reset_token}"})
        assert resp.status_code == 200

        resp = client.post('/api/auth/admin', json={"email": admin["email"], "password": "brandnew99"})
        assert resp.status_code == 200

    def test_forgot_password_unknown_email(self, client, sender):
        resp = client.post('/api/admins/forgetpswd', json={"email": "nobody@x.com"})
        assert resp.status_code == 404
        assert sender.sent == []

    def test_password_policy_on_reset(self, client, admin_headers):
        resp = client.put('/api/admins/password', headers=admin_headers, json={"password": "short"})
        assert resp.status_code == 400

    def test_change_email(self, client, admin_headers, admin, admin_realm, sender):
        resp = client.post('/api/admins/changeemail', headers=admin_headers, json={"email": "new@lifts.test"})
        assert resp.status_code == 200
        assert admin_realm.store.get(admin["id"])["emailConfirmed"] is False
        assert "/admin/confirmation?token=" in sender.last_to("new@lifts.test").html_body

    def test_change_email_taken(self, client, admin_headers, make_admin):
        make_admin(email="taken@lifts.test")
        resp = client.post('/api/admins/changeemail', headers=admin_headers, json={"email": "taken@lifts.test"})
        assert resp.status_code == 409

    def test_resend_confirmation_already_confirmed(self, client, admin_headers):
        resp = client.put('/api/admins/resendconfirmation', headers=admin_headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Email already confirmed"

    def test_resend_confirmation_pending(self, client, make_admin, admin_realm, sender):
        pending = make_admin(email="p@lifts.test", confirmed=False)
        headers = {"Authorization": f"Bearer {admin_realm.issuer.issue(pending['id'])}"}
        resp = client.put('/api/admins/resendconfirmation', headers=headers)
        assert resp.status_code == 200
        assert sender.last_to("p@lifts.test").subject.startswith("CONFIRM EMAIL")
