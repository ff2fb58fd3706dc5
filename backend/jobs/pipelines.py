"""
Board configuration: the Kanban pipelines, scheduler columns and install stages.
"""

PIPELINES = {
    'leads': [
        {'id': 'new_lead', 'title': 'New Lead'},
        {'id': 'contacted', 'title': 'Contacted/Waiting'},
        {'id': 'need_quote', 'title': 'Need to Quote'},
        {'id': 'book_inspection', 'title': 'Book Inspection'},
        {'id': 'quote_sent', 'title': 'Quote Sent'},
        {'id': 'deposit_paid', 'title': 'Deposit Paid'},
    ],
    'quotes': [
        {'id': 'fresh', 'title': 'Fresh (0-3 Days)'},
        {'id': 'in_discussion', 'title': 'In Discussion'},
        {'id': 'awaiting_reply', 'title': 'Awaiting Reply'},
        {'id': 'follow_up', 'title': 'Follow Up Required'},
        {'id': 'hot', 'title': 'Hot Lead'},
        {'id': 'revision', 'title': 'Revision Requested'},
        {'id': 'on_hold', 'title': 'On Hold'},
        {'id': 'lost', 'title': 'Lost'},
    ],
    'production': [
        {'id': 'work_order', 'title': 'Work Orders'},
        {'id': 'man_posts', 'title': 'Manufacture Posts'},
        {'id': 'inst_posts', 'title': 'Install Posts'},
        {'id': 'man_panels', 'title': 'Manufacture Panels'},
        {'id': 'inst_panels', 'title': 'Install Panels'},
    ],
}

SCHEDULER_COLUMNS = [
    {'id': 'new_jobs_won', 'title': 'New Jobs Won'},
    {'id': 'in_production', 'title': 'In Production'},
    {'id': 'waiting_supplier', 'title': 'Waiting on Supplier/Parts'},
    {'id': 'waiting_client', 'title': 'Waiting on Client'},
    {'id': 'need_to_go_back', 'title': 'Need to Go Back'},
    {'id': 'recently_completed', 'title': 'Recently Completed'},
]

INSTALL_STAGES = [
    {'id': 'pending_posts', 'title': 'Pending Posts'},
    {'id': 'tentative_posts', 'title': 'Tentative Posts'},
    {'id': 'posts_scheduled', 'title': 'Posts Scheduled'},
    {'id': 'measuring', 'title': 'Measuring'},
    {'id': 'manufacturing_panels', 'title': 'Manufacturing Panels'},
    {'id': 'pending_panels', 'title': 'Pending Panels'},
    {'id': 'tentative_panels', 'title': 'Tentative Panels'},
    {'id': 'panels_scheduled', 'title': 'Panels Scheduled'},
    {'id': 'completed', 'title': 'Completed'},
]

SCHEDULER_STAGE_IDS = frozenset(column['id'] for column in SCHEDULER_COLUMNS)


def board_configuration() -> dict:
    """Everything a client needs to lay out the boards."""
    return {
        'pipelines': PIPELINES,
        'scheduler_columns': SCHEDULER_COLUMNS,
        'install_stages': INSTALL_STAGES,
    }
