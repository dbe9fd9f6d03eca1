from Project.db_utils import (
    build_in_clause,
    db_now,
    execute_fetchall,
    execute_fetchone,
    execute_non_query,
    execute_write,
    format_datetime,
    format_decimal,
    to_decimal,
)

MENU_ITEM_TABLE = 'menu_item'
SPICE_LEVEL_TABLE = 'menu_spice_level'
TOPPING_TABLE = 'menu_topping'

SPICE_LEVEL_DISPLAY = {
    'mild': 'Tidak Pedas',
    'medium': 'Pedas Sedang',
    'spicy': 'Pedas',
    'extra_spicy': 'Extra Pedas',
}

MENU_FIELDS = ('name', 'description', 'base_price', 'category', 'is_available', 'image_url', 'preparation_time')


def _fetch_children(item_ids):
    spice_levels = {item_id: [] for item_id in item_ids}
    toppings = {item_id: [] for item_id in item_ids}
    if not item_ids:
        return spice_levels, toppings

    placeholders = build_in_clause(item_ids)
    for row in execute_fetchall(
        f'''
        SELECT id, menu_item_id, level, name, price_adjustment
        FROM {SPICE_LEVEL_TABLE}
        WHERE menu_item_id IN ({placeholders})
        ORDER BY id
        ''',
        item_ids,
    ):
        spice_levels[row['menu_item_id']].append(row)
    for row in execute_fetchall(
        f'''
        SELECT id, menu_item_id, name, price, category, is_available
        FROM {TOPPING_TABLE}
        WHERE menu_item_id IN ({placeholders})
        ORDER BY id
        ''',
        item_ids,
    ):
        toppings[row['menu_item_id']].append(row)
    return spice_levels, toppings


def _fetch_items(restaurant_ids, available_only=False):
    if not restaurant_ids:
        return []
    query = f'''
        SELECT *
        FROM {MENU_ITEM_TABLE}
        WHERE restaurant_id IN ({build_in_clause(restaurant_ids)})
    '''
    params = list(restaurant_ids)
    if available_only:
        query += ' AND is_available = %s'
        params.append(True)
    query += ' ORDER BY category, name, id'
    return execute_fetchall(query, params)


def serialize_menu_item(item, spice_levels, toppings):
    return {
        'id': item['id'],
        'restaurant_id': item['restaurant_id'],
        'name': item['name'],
        'description': item['description'],
        'base_price': format_decimal(item['base_price']),
        'category': item['category'],
        'is_available': bool(item['is_available']),
        'image_url': item['image_url'],
        'preparation_time': item['preparation_time'],
        'spice_levels': [{
            'level': level['level'],
            'name': level['name'] or SPICE_LEVEL_DISPLAY.get(level['level'], level['level']),
            'price_adjustment': format_decimal(level['price_adjustment']),
        } for level in spice_levels],
        'toppings': [{
            'id': topping['id'],
            'name': topping['name'],
            'price': format_decimal(topping['price']),
            'category': topping['category'],
            'is_available': bool(topping['is_available']),
        } for topping in toppings],
        'created_at': format_datetime(item['created_at']),
        'updated_at': format_datetime(item['updated_at']),
    }


def get_menu(restaurant_id, available_only=False):
    items = _fetch_items([restaurant_id], available_only=available_only)
    spice_levels, toppings = _fetch_children([item['id'] for item in items])
    return [serialize_menu_item(item, spice_levels[item['id']], toppings[item['id']]) for item in items]


def get_menu_item(restaurant_id, item_id):
    item = execute_fetchone(
        f'SELECT * FROM {MENU_ITEM_TABLE} WHERE id = %s AND restaurant_id = %s',
        [item_id, restaurant_id],
    )
    if not item:
        return None
    spice_levels, toppings = _fetch_children([item['id']])
    return serialize_menu_item(item, spice_levels[item['id']], toppings[item['id']])


def pricing_catalog(restaurant_id, item_ids):
    """Menu items keyed by id in the shape the price calculator reads."""
    item_ids = list({int(item_id) for item_id in item_ids})
    if not item_ids:
        return {}
    items = execute_fetchall(
        f'''
        SELECT id, name, base_price, is_available, preparation_time
        FROM {MENU_ITEM_TABLE}
        WHERE restaurant_id = %s AND id IN ({build_in_clause(item_ids)})
        ''',
        [restaurant_id] + item_ids,
    )
    spice_levels, toppings = _fetch_children([item['id'] for item in items])
    catalog = {}
    for item in items:
        catalog[item['id']] = {
            'id': item['id'],
            'name': item['name'],
            'base_price': to_decimal(item['base_price']),
            'is_available': bool(item['is_available']),
            'preparation_time': item['preparation_time'],
            'spice_levels': {
                level['level']: to_decimal(level['price_adjustment']) for level in spice_levels[item['id']]
            },
            'toppings': {
                topping['id']: {
                    'id': topping['id'],
                    'name': topping['name'],
                    'price': to_decimal(topping['price']),
                    'is_available': bool(topping['is_available']),
                } for topping in toppings[item['id']]
            },
        }
    return catalog


def _replace_spice_levels(item_id, spice_levels):
    execute_non_query(f'DELETE FROM {SPICE_LEVEL_TABLE} WHERE menu_item_id = %s', [item_id])
    for level in spice_levels:
        execute_write(
            f'''
            INSERT INTO {SPICE_LEVEL_TABLE} (menu_item_id, level, name, price_adjustment)
            VALUES (%s, %s, %s, %s)
            ''',
            [item_id, level.level, level.name or SPICE_LEVEL_DISPLAY[level.level], to_decimal(level.price_adjustment)],
        )


def _detach_toppings(item_id):
    # ordered toppings keep their name and price snapshot
    execute_non_query(
        f'''
        UPDATE order_item_topping SET topping_id = NULL
        WHERE topping_id IN (SELECT id FROM {TOPPING_TABLE} WHERE menu_item_id = %s)
        ''',
        [item_id],
    )
    execute_non_query(f'DELETE FROM {TOPPING_TABLE} WHERE menu_item_id = %s', [item_id])


def _replace_toppings(item_id, toppings):
    _detach_toppings(item_id)
    for topping in toppings:
        execute_write(
            f'''
            INSERT INTO {TOPPING_TABLE} (menu_item_id, name, price, category, is_available)
            VALUES (%s, %s, %s, %s, %s)
            ''',
            [item_id, topping.name, to_decimal(topping.price), topping.category, topping.is_available],
        )


def create_menu_item(restaurant_id, data):
    now = db_now()
    item_id = execute_write(
        f'''
        INSERT INTO {MENU_ITEM_TABLE}
            (restaurant_id, name, description, base_price, category, is_available,
             image_url, preparation_time, created_at, updated_at)
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        ''',
        [
            restaurant_id, data.name, data.description, to_decimal(data.base_price), data.category,
            data.is_available, data.image_url, data.preparation_time, now, now,
        ],
    )
    _replace_spice_levels(item_id, data.spice_levels)
    _replace_toppings(item_id, data.toppings)
    return item_id


def update_menu_item(item_id, data):
    """Apply a partial update; spice levels and toppings are replaced only when sent."""
    changes = data.model_dump(exclude_unset=True, exclude_none=True, include=set(MENU_FIELDS))
    if 'base_price' in changes:
        changes['base_price'] = to_decimal(changes['base_price'])
    assignments = [f'{field} = %s' for field in changes] + ['updated_at = %s']
    params = list(changes.values()) + [db_now(), item_id]
    execute_non_query(f"UPDATE {MENU_ITEM_TABLE} SET {', '.join(assignments)} WHERE id = %s", params)

    if data.spice_levels is not None and 'spice_levels' in data.model_fields_set:
        _replace_spice_levels(item_id, data.spice_levels)
    if data.toppings is not None and 'toppings' in data.model_fields_set:
        _replace_toppings(item_id, data.toppings)


def delete_menu_item(item_id):
    execute_non_query('UPDATE order_item SET menu_item_id = NULL WHERE menu_item_id = %s', [item_id])
    _detach_toppings(item_id)
    execute_non_query(f'DELETE FROM {SPICE_LEVEL_TABLE} WHERE menu_item_id = %s', [item_id])
    return execute_non_query(f'DELETE FROM {MENU_ITEM_TABLE} WHERE id = %s', [item_id])
