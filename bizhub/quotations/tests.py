"""
Test suite for quotations
Tests: content block building, creation defaults, draft-only editing, duplicate and finalize
"""
from django.test import TestCase
from rest_framework import status

from bizhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizhub.quotations.builders import (
    ensure_terms_block, resolve_company_details, resolve_content_blocks, sections_to_content_blocks,
)
from bizhub.quotations.models import Quotation

QUOTATIONS_URL = '/api/v1/quotations/'


class BuilderTests(TestCase):
    def test_sections_to_blocks(self):
        pages = [{
            'sections': [
                {'type': 'heading', 'heading': 'Scope'},
                {'type': 'text', 'content': 'We will supply...'},
                {'type': 'text', 'content': '   '},
                {'type': 'list', 'heading': 'Deliverables', 'items': ['Design', '', 'Build']},
                {'type': 'table', 'table': {
                    'columns': [{'id': 'c1', 'name': 'Item'}, {'id': 'c2', 'name': 'Price'}],
                    'rows': [{'cells': {'c1': 'Server', 'c2': '1000'}}],
                }},
            ],
        }]
        blocks = sections_to_content_blocks(pages)
        self.assertEqual([block['type'] for block in blocks], ['heading', 'paragraph', 'list', 'table'])
        self.assertEqual(blocks[0]['style']['font_weight'], 'bold')
        self.assertEqual(blocks[2]['items'], ['Design', 'Build'])
        self.assertEqual(blocks[3]['table_data']['headers'], ['Item', 'Price'])
        self.assertEqual(blocks[3]['table_data']['rows'], [['Server', '1000']])
        self.assertEqual(blocks[3]['table_data']['style']['header_bg_color'], '#1a5276')

    def test_empty_table_gets_placeholder_shape(self):
        blocks = sections_to_content_blocks([{'sections': [{'type': 'table', 'table': {'columns': [], 'rows': []}}]}])
        self.assertEqual(blocks[0]['table_data']['headers'], ['Column 1', 'Column 2'])
        self.assertEqual(blocks[0]['table_data']['rows'], [['', '']])

    def test_terms_block_appended_once(self):
        blocks = ensure_terms_block([], '50% advance\nDelivery in 4 weeks, GST extra')
        self.assertEqual(blocks[0]['content'], 'Terms & Conditions')
        self.assertEqual(blocks[1]['items'], ['50% advance', 'Delivery in 4 weeks', 'GST extra'])
        self.assertEqual(ensure_terms_block(blocks, 'Other terms'), blocks)

    def test_explicit_blocks_win(self):
        explicit = [{'id': 'x', 'type': 'paragraph', 'content': 'Hello'}]
        blocks = resolve_content_blocks(explicit, {'content_blocks': [{'id': 'y'}]}, None, {})
        self.assertEqual(blocks, explicit)

    def test_company_details_fallbacks(self):
        automated = resolve_company_details(True, {
            'company_name': 'Acme', 'company_address': 'Line 1\nLine 2', 'company_contact': '+91 1, a@acme.in',
        }, {})
        self.assertEqual(automated['address'], 'Line 1, Line 2')
        self.assertEqual(automated['email'], 'a@acme.in')
        self.assertEqual(resolve_company_details(False, {}, {})['name'], 'Your Company Name')


class QuotationAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    def test_create_with_defaults(self):
        response = self.client.post(QUOTATIONS_URL, {
            'type': 'automated',
            'answers': {
                'company_name': 'Acme',
                'client_name': 'Globex',
                'project_subject': 'Network upgrade',
                'terms_conditions': 'Payment in 30 days',
            },
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data
        self.assertEqual(data['title'], 'New Quotation')
        self.assertEqual(data['status'], 'draft')
        self.assertRegex(data['ref_no'], r'^REF-\d{6}$')
        self.assertEqual(data['subject'], 'Network upgrade')
        self.assertEqual(data['greeting'], 'Dear Sir,')
        self.assertEqual(data['company_details']['name'], 'Acme')
        self.assertEqual(data['client_details']['company'], 'Globex')
        self.assertEqual(data['watermark']['type'], 'none')
        self.assertEqual(data['default_font_family'], 'Times New Roman')
        self.assertEqual(data['content_blocks'][-1]['items'], ['Payment in 30 days'])

    def test_invalid_block_rejected(self):
        response = self.client.post(QUOTATIONS_URL, {
            'content_blocks': [{'id': 'b1', 'type': 'image'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_body_must_be_an_object(self):
        response = self.client.post(QUOTATIONS_URL, [{'title': 'Server rollout'}], format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Quotation.objects.count(), 0)

    def test_list_search_and_scope(self):
        TestDataFactory.create_quotation(self.user, title='Server supply')
        TestDataFactory.create_quotation(self.user, title='Office chairs')
        TestDataFactory.create_quotation(self.other, title='Server rack')

        response = self.client.get(QUOTATIONS_URL)
        self.assertEqual(response.data['count'], 2)
        response = self.client.get(f'{QUOTATIONS_URL}?search=server')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['title'], 'Server supply')
        response = self.client.get(f'{QUOTATIONS_URL}?limit=1&page=2')
        self.assertEqual(response.data['page'], 2)
        self.assertEqual(response.data['total_pages'], 2)

    def test_edit_draft(self):
        quotation = TestDataFactory.create_quotation(self.user)
        response = self.client.patch(f'{QUOTATIONS_URL}{quotation.id}/', {
            'subject': 'Revised',
            'content_blocks': [{'id': 'b1', 'type': 'heading', 'content': 'Scope', 'style': {'font_size': 14}}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        quotation.refresh_from_db()
        self.assertEqual(quotation.subject, 'Revised')
        self.assertEqual(quotation.content_blocks[0]['style'], {'font_size': 14})

    def test_finalize_locks_quotation(self):
        quotation = TestDataFactory.create_quotation(self.user)
        response = self.client.post(f'{QUOTATIONS_URL}{quotation.id}/finalize/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'finalized')

        self.assertEqual(self.client.post(f'{QUOTATIONS_URL}{quotation.id}/finalize/').status_code, status.HTTP_409_CONFLICT)
        response = self.client.patch(f'{QUOTATIONS_URL}{quotation.id}/', {'subject': 'Late edit'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_duplicate(self):
        quotation = TestDataFactory.create_quotation(self.user, title='Server supply', status='finalized')
        response = self.client.post(f'{QUOTATIONS_URL}{quotation.id}/duplicate/')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['title'], 'Copy of Server supply')
        self.assertEqual(response.data['status'], 'draft')
        self.assertEqual(response.data['ref_no'], quotation.ref_no)

    def test_foreign_quotation_not_found(self):
        quotation = TestDataFactory.create_quotation(self.other)
        self.assertEqual(self.client.get(f'{QUOTATIONS_URL}{quotation.id}/').status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.delete(f'{QUOTATIONS_URL}{quotation.id}/').status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.post(f'{QUOTATIONS_URL}{quotation.id}/duplicate/').status_code, status.HTTP_404_NOT_FOUND)
        self.assertTrue(Quotation.objects.filter(pk=quotation.id).exists())

    def test_delete(self):
        quotation = TestDataFactory.create_quotation(self.user)
        self.assertEqual(self.client.delete(f'{QUOTATIONS_URL}{quotation.id}/').status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Quotation.objects.filter(pk=quotation.id).exists())
