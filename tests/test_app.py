import json

from dancefloor.models import get_db, Dancefloor


def post_json(client, url, payload=None, method='post'):
    return getattr(client, method)(url, data=json.dumps(payload or {}), content_type='application/json')


class TestHealthEndpoint:
    """Test the health check endpoint"""

    def test_health_returns_200(self, client):
        response = client.get('/health')
        assert response.status_code == 200
        assert json.loads(response.data)['status'] == 'ok'


class TestSongRequestEndpoints:
    """Submitting and listing song requests over HTTP"""

    def test_list_returns_empty_array(self, client, dancefloor_id):
        response = client.get(f'/api/dancefloor/{dancefloor_id}/song-requests')
        assert response.status_code == 200
        assert json.loads(response.data) == []

    def test_submit_song_request(self, client, dancefloor_id):
        response = post_json(client, f'/api/dancefloor/{dancefloor_id}/song-requests', {'song': 'Song X'})
        assert response.status_code == 201

        data = json.loads(response.data)
        assert data['song'] == 'Song X'
        assert data['status'] == 'queued'
        assert data['requestsCount'] == 1

        listed = json.loads(client.get(f'/api/dancefloor/{dancefloor_id}/song-requests').data)
        assert [r['id'] for r in listed] == [data['id']]

    def test_submit_empty_song_is_400(self, client, dancefloor_id):
        response = post_json(client, f'/api/dancefloor/{dancefloor_id}/song-requests', {'song': ''})
        assert response.status_code == 400
        assert 'error' in json.loads(response.data)

    def test_submit_to_unknown_dancefloor_is_404(self, client, database_url):
        response = post_json(client, '/api/dancefloor/missing/song-requests', {'song': 'Song X'})
        assert response.status_code == 404

    def test_list_orders_by_votes_then_age(self, client, dancefloor_id, add_request):
        add_request(dancefloor_id, 'A', votes=3)
        add_request(dancefloor_id, 'B', votes=1)
        add_request(dancefloor_id, 'C', votes=3)

        listed = json.loads(client.get(f'/api/dancefloor/{dancefloor_id}/song-requests').data)
        assert [r['song'] for r in listed] == ['A', 'C', 'B']

    def test_list_with_invalid_sort_is_400(self, client, dancefloor_id):
        response = client.get(f'/api/dancefloor/{dancefloor_id}/song-requests?sort=shuffle')
        assert response.status_code == 400


class TestStatusEndpoints:
    """Status changes over HTTP"""

    def test_status_update(self, client, dancefloor_id, add_request, fetch_request):
        request_id = add_request(dancefloor_id, 'A')

        response = post_json(client, f'/api/song-request/{request_id}/status', {'status': 'declined'})
        assert response.status_code == 200
        assert json.loads(response.data)['message'] == 'Song request marked as declined.'
        assert fetch_request(request_id).status == 'declined'

    def test_invalid_status_is_400(self, client, dancefloor_id, add_request):
        request_id = add_request(dancefloor_id, 'A')
        response = post_json(client, f'/api/song-request/{request_id}/status', {'status': 'paused'})
        assert response.status_code == 400
        assert json.loads(response.data)['error'] == 'Invalid status value.'

    def test_unknown_request_is_404(self, client, database_url):
        response = post_json(client, '/api/song-request/missing/status', {'status': 'completed'})
        assert response.status_code == 404

    def test_play_demotes_current_song(self, client, dancefloor_id, add_request, fetch_request):
        a = add_request(dancefloor_id, 'A', status='playing')
        b = add_request(dancefloor_id, 'B')

        response = client.put(f'/api/song-request/{b}/play')
        assert response.status_code == 200
        assert fetch_request(a).status == 'queued'
        assert fetch_request(b).status == 'playing'

    def test_complete_and_decline(self, client, dancefloor_id, add_request, fetch_request):
        a = add_request(dancefloor_id, 'A', status='playing')
        b = add_request(dancefloor_id, 'B')

        assert client.put(f'/api/song-request/{a}/complete').status_code == 200
        assert client.put(f'/api/song-request/{b}/decline').status_code == 200
        assert fetch_request(a).status == 'completed'
        assert fetch_request(b).status == 'declined'


class TestVoteEndpoints:
    """Voting over HTTP"""

    def test_vote_once_per_session(self, client, dancefloor_id, add_request):
        request_id = add_request(dancefloor_id, 'A')

        response = client.put(f'/api/song-request/{request_id}/vote')
        assert response.status_code == 200
        assert json.loads(response.data)['votes'] == 1

        response = client.put(f'/api/song-request/{request_id}/like')
        assert response.status_code == 400
        assert 'already voted' in json.loads(response.data)['error']

    def test_explicit_voters(self, client, dancefloor_id, add_request):
        request_id = add_request(dancefloor_id, 'A')

        post_json(client, f'/api/song-request/{request_id}/like', {'voterId': 'one'}, method='put')
        response = post_json(client, f'/api/song-request/{request_id}/like', {'voterId': 'two'}, method='put')
        assert json.loads(response.data)['likes'] == 2

    def test_vote_unknown_request_is_404(self, client, database_url):
        assert client.put('/api/song-request/missing/vote').status_code == 404


class TestReorderEndpoint:

    def test_reorder(self, client, dancefloor_id, add_request):
        a = add_request(dancefloor_id, 'A')
        b = add_request(dancefloor_id, 'B')
        c = add_request(dancefloor_id, 'C')

        response = post_json(client, f'/api/dancefloor/{dancefloor_id}/reorder', {'order': [
            {'requestId': a, 'newOrder': 2},
            {'requestId': b, 'newOrder': 1},
            {'requestId': c, 'newOrder': 3},
        ]}, method='put')
        assert response.status_code == 200

        listed = json.loads(client.get(f'/api/dancefloor/{dancefloor_id}/song-requests?sort=order').data)
        assert [r['song'] for r in listed] == ['B', 'A', 'C']

    def test_reorder_without_list_is_400(self, client, dancefloor_id):
        response = post_json(client, f'/api/dancefloor/{dancefloor_id}/reorder', {'order': 'A,B'}, method='put')
        assert response.status_code == 400


class TestMessageEndpoints:
    """Chat over HTTP"""

    def test_message_at_limit_is_accepted(self, client, dancefloor_id):
        response = post_json(client, f'/api/dancefloor/{dancefloor_id}/messages', {'message': 'x' * 300})
        assert response.status_code == 201
        assert json.loads(response.data)['messagesCount'] == 1

    def test_message_over_limit_is_rejected(self, client, dancefloor_id):
        response = post_json(client, f'/api/dancefloor/{dancefloor_id}/messages', {'message': 'x' * 301})
        assert response.status_code == 400

        messages = json.loads(client.get(f'/api/dancefloor/{dancefloor_id}/messages').data)
        assert messages == []

    def test_dj_author_is_kept(self, client, make_dj, dancefloor_id):
        dj_id = make_dj()
        response = post_json(client, f'/api/dancefloor/{dancefloor_id}/messages', {'message': 'hi', 'authorId': dj_id})
        assert json.loads(response.data)['authorId'] == dj_id

        response = post_json(client, f'/api/dancefloor/{dancefloor_id}/messages', {'message': 'hi', 'authorId': 'nobody'})
        assert response.status_code == 201
        assert json.loads(response.data)['authorId'] is None

    def test_message_history(self, client, dancefloor_id):
        post_json(client, f'/api/dancefloor/{dancefloor_id}/messages', {'message': 'first'})
        post_json(client, f'/api/dancefloor/{dancefloor_id}/messages', {'message': 'second'})

        messages = json.loads(client.get(f'/api/dancefloor/{dancefloor_id}/messages').data)
        assert [m['message'] for m in messages] == ['first', 'second']


class TestDancefloorEndpoints:
    """Dancefloor lifecycle"""

    def test_start_completes_previous_dancefloor(self, client, make_dj):
        dj_id = make_dj()

        first = json.loads(post_json(client, '/api/start-dancefloor', {'djId': dj_id}).data)['dancefloorId']
        second = json.loads(post_json(client, '/api/start-dancefloor', {'djId': dj_id}).data)['dancefloorId']

        assert first != second
        with get_db() as db:
            assert db.query(Dancefloor).filter_by(id=first).one().status == 'completed'
            assert db.query(Dancefloor).filter_by(id=second).one().status == 'active'

        past = json.loads(client.get(f'/api/dj/{dj_id}/past-dancefloors').data)
        assert [d['id'] for d in past] == [first]

    def test_start_for_unknown_dj_is_404(self, client, database_url):
        assert post_json(client, '/api/start-dancefloor', {'djId': 'nobody'}).status_code == 404

    def test_start_without_dj_is_400(self, client, database_url):
        assert post_json(client, '/api/start-dancefloor', {}).status_code == 400

    def test_stop_uses_signed_in_dj(self, client, make_dj):
        dj_id = make_dj()
        with client.session_transaction() as sess:
            sess['dj'] = {'id': dj_id, 'name': 'DJ Test', 'email': 'dj@example.com'}

        dancefloor_id = json.loads(post_json(client, '/api/start-dancefloor').data)['dancefloorId']
        response = post_json(client, '/api/stop-dancefloor')

        assert json.loads(response.data)['stopped'] is True
        with get_db() as db:
            dancefloor = db.query(Dancefloor).filter_by(id=dancefloor_id).one()
            assert dancefloor.status == 'completed'
            assert dancefloor.ended_at is not None

    def test_details_include_requests_and_messages(self, client, dancefloor_id, add_request):
        add_request(dancefloor_id, 'A', votes=1)
        add_request(dancefloor_id, 'B', votes=5)
        post_json(client, f'/api/dancefloor/{dancefloor_id}/messages', {'message': 'hi'})

        data = json.loads(client.get(f'/api/dancefloor/{dancefloor_id}').data)
        assert data['id'] == dancefloor_id
        assert data['messagesCount'] == 1
        # Details list requests in creation order
        assert [r['song'] for r in data['songRequests']] == ['A', 'B']
        assert [m['message'] for m in data['messages']] == ['hi']

    def test_details_unknown_is_404(self, client, database_url):
        assert client.get('/api/dancefloor/missing').status_code == 404


class TestSessionEndpoint:

    def test_no_session_is_401(self, client):
        assert client.get('/api/session').status_code == 401

    def test_session_returns_principal(self, client):
        with client.session_transaction() as sess:
            sess['dj'] = {'id': 'dj-1', 'name': 'DJ Test', 'email': 'dj@example.com'}

        response = client.get('/api/session')
        assert response.status_code == 200
        assert json.loads(response.data)['dj'] == {'id': 'dj-1', 'name': 'DJ Test', 'email': 'dj@example.com'}

        client.post('/api/logout')
        assert client.get('/api/session').status_code == 401
