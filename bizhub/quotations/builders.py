"""
Content-block construction for new quotations

Quotations are edited as an ordered list of blocks (heading, paragraph,
list, table). Older payloads arrive as pages of sections and are converted.
"""
import random
import re
import time

BASE_STYLE = {
    'font_size': 11,
    'font_weight': 'normal',
    'font_style': 'normal',
    'text_decoration': 'none',
    'text_align': 'left',
    'line_height': 1.5,
    'color': '#1a1a1a',
}

HEADING_STYLE = dict(BASE_STYLE, font_size=13, font_weight='bold', text_decoration='underline')

TABLE_STYLE = {
    'header_bg_color': '#1a5276',
    'header_text_color': '#ffffff',
    'border_color': '#cccccc',
    'border_width': 1,
    'text_color': '#1a1a1a',
    'alternate_row_color': '#f9fafb',
    'font_size': 10,
}

DEFAULT_COMPANY = {
    'name': 'Your Company Name',
    'address': 'Address Line 1, City, State, Country',
    'phone': '+91 XXXXX XXXXX',
    'email': '',
    'logo': '',
    'gstin': '',
}

DEFAULT_FOOTER = {
    'line1': 'Your Products | Your Services | Your Solutions',
    'line2': 'Additional Services | Customized Solutions',
    'line3': 'Authorized Submitter: Your Name',
}


def _text(value):
    return value.strip() if isinstance(value, str) else ''


def sections_to_content_blocks(pages):
    """Convert pages -> sections (heading/text/list/table) into content blocks"""
    blocks = []
    index = 0
    for page in pages or []:
        if not isinstance(page, dict):
            continue
        for section in page.get('sections') or []:
            if not isinstance(section, dict) or not section.get('type'):
                continue
            section_type = section['type']

            if section_type == 'heading':
                if _text(section.get('heading')):
                    index += 1
                    blocks.append({'id': f'block-{index}', 'type': 'heading',
                                   'content': section['heading'], 'style': dict(HEADING_STYLE)})
            elif section_type == 'text':
                if _text(section.get('content')):
                    index += 1
                    blocks.append({'id': f'block-{index}', 'type': 'paragraph',
                                   'content': section['content'], 'style': dict(BASE_STYLE)})
            elif section_type == 'list':
                items = [item for item in section.get('items') or [] if _text(item)]
                if items:
                    index += 1
                    blocks.append({'id': f'block-{index}', 'type': 'list', 'content': section.get('heading') or '',
                                   'items': items, 'style': dict(BASE_STYLE)})
            elif section_type == 'table' and isinstance(section.get('table'), dict):
                table = section['table']
                columns = table.get('columns') or []
                headers = [column.get('name') or column.get('id') or '' for column in columns]
                rows = [
                    [(row.get('cells') or {}).get(column.get('id'), '') or '' for column in columns]
                    for row in table.get('rows') or []
                ]
                index += 1
                blocks.append({
                    'id': f'block-{index}',
                    'type': 'table',
                    'content': section.get('heading') or table.get('name') or '',
                    'table_data': {
                        'headers': headers or ['Column 1', 'Column 2'],
                        'rows': rows or [['', '']],
                        'style': dict(TABLE_STYLE),
                    },
                    'style': dict(BASE_STYLE),
                })
    return blocks


def ensure_terms_block(blocks, terms_raw):
    """Append a Terms & Conditions heading and list unless a terms heading already exists"""
    terms_raw = _text(terms_raw)
    if not terms_raw:
        return blocks
    has_terms = any(
        block.get('type') == 'heading' and re.search('terms', block.get('content') or '', re.IGNORECASE)
        for block in blocks
    )
    if has_terms:
        return blocks

    items = [item.strip() for item in re.split(r'[\n,]', terms_raw) if item.strip()]
    stamp = int(time.time() * 1000)
    return list(blocks) + [
        {'id': f'terms-h-{stamp}', 'type': 'heading', 'content': 'Terms & Conditions', 'style': dict(HEADING_STYLE)},
        {'id': f'terms-l-{stamp}', 'type': 'list', 'content': 'Terms', 'items': items or [terms_raw],
         'style': dict(BASE_STYLE)},
    ]


def resolve_content_blocks(content_blocks, ai_data, pages, answers):
    """Explicit blocks win, then pre-generated blocks, then converted pages; terms are always guaranteed"""
    ai_data = ai_data or {}
    if content_blocks:
        blocks = list(content_blocks)
    elif ai_data.get('content_blocks'):
        blocks = list(ai_data['content_blocks'])
    elif ai_data.get('pages') or pages:
        blocks = sections_to_content_blocks(ai_data.get('pages') or pages)
    else:
        blocks = []
    return ensure_terms_block(blocks, (answers or {}).get('terms_conditions'))


def resolve_company_details(is_automated, answers, ai_data):
    """Company header: questionnaire answers, then pre-generated data, then placeholders"""
    answers = answers or {}
    ai_data = ai_data or {}
    if is_automated and _text(answers.get('company_name')):
        address_lines = (answers.get('company_address') or '').split('\n')
        contact = [part.strip() for part in (answers.get('company_contact') or '').split(',')]
        return {
            'name': answers['company_name'],
            'address': ', '.join(line.strip() for line in address_lines if line.strip()),
            'phone': contact[0] if contact else '',
            'email': contact[1] if len(contact) > 1 else '',
            'logo': ai_data.get('company_logo') or '',
            'gstin': answers.get('company_gstin') or '',
        }
    return {
        'name': ai_data.get('company_name') or DEFAULT_COMPANY['name'],
        'address': ai_data.get('company_address') or DEFAULT_COMPANY['address'],
        'phone': ai_data.get('company_phone') or DEFAULT_COMPANY['phone'],
        'email': ai_data.get('company_email') or DEFAULT_COMPANY['email'],
        'logo': ai_data.get('company_logo') or DEFAULT_COMPANY['logo'],
        'gstin': ai_data.get('company_gstin') or DEFAULT_COMPANY['gstin'],
    }


def resolve_client_details(is_automated, answers):
    answers = answers or {}
    if is_automated and _text(answers.get('client_name')):
        return {
            'name': answers['client_name'],
            'designation': '',
            'company': answers['client_name'],
            'contact': answers.get('client_contact') or '',
            'address': answers.get('client_address') or '',
        }
    return {}


def generate_ref_no():
    return f"REF-{random.randint(0, 999999):06d}"
