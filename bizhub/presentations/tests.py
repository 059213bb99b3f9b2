"""
Test suite for presentation workspaces
Tests: CRUD scoping, slide schema validation and single-slide edits
"""
from django.test import TestCase
from rest_framework import status

from bizhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizhub.presentations.models import PresentationWorkspace
from bizhub.presentations.serializers import SlideSerializer

PRESENTATIONS_URL = '/api/v1/presentations/'


class SlideSchemaTests(TestCase):
    def test_defaults(self):
        serializer = SlideSerializer(data={'title': 'Intro'})
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.validated_data['layout_type'], 'imageRight')
        self.assertTrue(serializer.validated_data['has_image'])
        self.assertEqual(serializer.validated_data['image_source'], 'ai')

    def test_title_required(self):
        self.assertFalse(SlideSerializer(data={'layout_type': 'title'}).is_valid())

    def test_unknown_layout_rejected(self):
        self.assertFalse(SlideSerializer(data={'title': 'x', 'layout_type': 'carousel'}).is_valid())

    def test_image_size_bounds(self):
        self.assertFalse(SlideSerializer(data={'title': 'x', 'image_size': {'width': 5}}).is_valid())
        serializer = SlideSerializer(data={'title': 'x', 'image_size': {'width': 60, 'height': 100}})
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.validated_data['image_size']['object_fit'], 'cover')

    def test_icon_list_content(self):
        serializer = SlideSerializer(data={
            'title': 'Why us',
            'layout_type': 'iconList',
            'content': [{'icon': 'star', 'text': 'Quality'}, {'icon': 'clock', 'text': 'Speed'}],
        })
        self.assertTrue(serializer.is_valid(), serializer.errors)


class WorkspaceAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    def test_create_with_defaults(self):
        response = self.client.post(PRESENTATIONS_URL, {'name': '  Q3 Review  ', 'prompt': 'Quarterly results'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'Q3 Review')
        self.assertEqual(response.data['slide_count'], 8)
        self.assertEqual(response.data['theme'], 'modern')
        self.assertEqual(response.data['status'], 'draft')

    def test_name_required_and_slide_count_bounds(self):
        self.assertEqual(self.client.post(PRESENTATIONS_URL, {'name': '  '}, format='json').status_code,
                         status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.client.post(PRESENTATIONS_URL, {'name': 'Deck', 'slide_count': 51}, format='json').status_code,
                         status.HTTP_400_BAD_REQUEST)

    def test_list_scoped_and_filtered(self):
        TestDataFactory.create_workspace(self.user, name='Draft deck')
        TestDataFactory.create_workspace(self.user, name='Done deck', status='completed')
        TestDataFactory.create_workspace(self.other, name='Foreign deck')

        response = self.client.get(PRESENTATIONS_URL)
        self.assertEqual(len(response.data), 2)
        response = self.client.get(f'{PRESENTATIONS_URL}?status=completed')
        self.assertEqual([row['name'] for row in response.data], ['Done deck'])

    def test_patch_only_changes_given_fields(self):
        workspace = TestDataFactory.create_workspace(self.user, name='Deck', theme='dark')
        response = self.client.patch(f'{PRESENTATIONS_URL}{workspace.id}/', {
            'status': 'generated',
            'presentation': {'title': 'Deck', 'slides': [{'title': 'Intro', 'layout_type': 'title'}]},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['theme'], 'dark')
        self.assertEqual(response.data['slide_total'], 1)
        self.assertTrue(response.data['presentation']['slides'][0]['has_image'])

    def test_invalid_presentation_rejected(self):
        workspace = TestDataFactory.create_workspace(self.user)
        response = self.client.patch(f'{PRESENTATIONS_URL}{workspace.id}/', {
            'presentation': {'title': 'Deck', 'slides': [{'layout_type': 'title'}]},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_foreign_workspace_not_found(self):
        workspace = TestDataFactory.create_workspace(self.other)
        url = f'{PRESENTATIONS_URL}{workspace.id}/'
        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.patch(url, {'name': 'Mine'}, format='json').status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_404_NOT_FOUND)
        self.assertTrue(PresentationWorkspace.objects.filter(pk=workspace.id).exists())

    def test_delete(self):
        workspace = TestDataFactory.create_workspace(self.user)
        self.assertEqual(self.client.delete(f'{PRESENTATIONS_URL}{workspace.id}/').status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(PresentationWorkspace.objects.filter(pk=workspace.id).exists())


class SlideUpdateTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)
        self.workspace = TestDataFactory.create_workspace(self.user, name='Deck', slides=[
            {'title': 'Intro', 'layout_type': 'title', 'has_image': False},
            {'title': 'Numbers', 'layout_type': 'metrics', 'metrics': [{'value': '42%', 'label': 'Growth'}]},
        ])

    def test_update_one_slide(self):
        response = self.client.patch(f'{PRESENTATIONS_URL}{self.workspace.id}/slides/1/', {
            'title': 'Key numbers',
            'image_size': {'width': 50, 'height': 40, 'object_fit': 'contain'},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.workspace.refresh_from_db()
        slides = self.workspace.presentation['slides']
        self.assertEqual(slides[0]['title'], 'Intro')
        self.assertEqual(slides[1]['title'], 'Key numbers')
        self.assertEqual(slides[1]['layout_type'], 'metrics')
        self.assertEqual(slides[1]['metrics'][0]['value'], '42%')
        self.assertEqual(slides[1]['image_size']['object_fit'], 'contain')

    def test_index_out_of_range(self):
        response = self.client.patch(f'{PRESENTATIONS_URL}{self.workspace.id}/slides/2/', {'title': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_invalid_slide_edit(self):
        response = self.client.patch(f'{PRESENTATIONS_URL}{self.workspace.id}/slides/0/', {'layout_type': 'carousel'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_slide_edit_body_must_be_an_object(self):
        response = self.client.patch(f'{PRESENTATIONS_URL}{self.workspace.id}/slides/0/', [{'title': 'x'}], format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.workspace.refresh_from_db()
        self.assertEqual(self.workspace.presentation['slides'][0]['title'], 'Intro')
