"""Backend table names and reference schema."""

from __future__ import annotations

CUSTOMERS_TABLE = "customers"
ESTIMATES_TABLE = "estimates"
ESTIMATE_ITEMS_TABLE = "estimate_line_items"
# "invoices" is taken by another resource in the same project
INVOICES_TABLE = "crm_invoices"
INVOICE_ITEMS_TABLE = "crm_invoice_line_items"
PAYMENTS_TABLE = "payments"

ALL_TABLES = (
    CUSTOMERS_TABLE,
    ESTIMATES_TABLE,
    ESTIMATE_ITEMS_TABLE,
    INVOICES_TABLE,
    INVOICE_ITEMS_TABLE,
    PAYMENTS_TABLE,
)

# Postgres DDL for provisioning a new project from the SQL editor.
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS customers (
    id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    name text NOT NULL,
    email text,
    phone text,
    address text,
    notes text,
    created_at timestamptz NOT NULL DEFAULT now(),
    updated_at timestamptz NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS estimates (
    id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    estimate_number text NOT NULL UNIQUE,
    customer_id uuid NOT NULL REFERENCES customers(id),
    estimate_date date NOT NULL DEFAULT current_date,
    expiry_date date,
    tech_name text NOT NULL,
    notes text,
    status text NOT NULL DEFAULT 'draft'
        CHECK (status IN ('draft', 'sent', 'approved', 'rejected', 'expired')),
    total_amount numeric(12, 2) NOT NULL DEFAULT 0,
    created_at timestamptz NOT NULL DEFAULT now(),
    updated_at timestamptz NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS estimate_line_items (
    id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    estimate_id uuid NOT NULL REFERENCES estimates(id) ON DELETE CASCADE,
    description text NOT NULL,
    material_cost numeric(12, 2) NOT NULL DEFAULT 0,
    labor_cost numeric(12, 2) NOT NULL DEFAULT 0,
    total_cost numeric(12, 2) NOT NULL DEFAULT 0,
    sort_order integer NOT NULL DEFAULT 0,
    created_at timestamptz NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS crm_invoices (
    id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    invoice_number text NOT NULL UNIQUE,
    customer_id uuid NOT NULL REFERENCES customers(id),
    invoice_date date NOT NULL DEFAULT current_date,
    due_date date,
    work_completed_date date,
    tech_name text NOT NULL,
    notes text,
    status text NOT NULL DEFAULT 'draft'
        CHECK (status IN ('draft', 'sent', 'partial', 'paid', 'overdue', 'cancelled')),
    total_amount numeric(12, 2) NOT NULL DEFAULT 0,
    amount_paid numeric(12, 2) NOT NULL DEFAULT 0,
    amount_due numeric(12, 2) NOT NULL DEFAULT 0,
    created_at timestamptz NOT NULL DEFAULT now(),
    updated_at timestamptz NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS crm_invoice_line_items (
    id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    invoice_id uuid NOT NULL REFERENCES crm_invoices(id) ON DELETE CASCADE,
    description text NOT NULL,
    material_cost numeric(12, 2) NOT NULL DEFAULT 0,
    labor_cost numeric(12, 2) NOT NULL DEFAULT 0,
    total_cost numeric(12, 2) NOT NULL DEFAULT 0,
    sort_order integer NOT NULL DEFAULT 0,
    created_at timestamptz NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS payments (
    id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    invoice_id uuid NOT NULL REFERENCES crm_invoices(id) ON DELETE CASCADE,
    payment_date date NOT NULL DEFAULT current_date,
    amount numeric(12, 2) NOT NULL CHECK (amount > 0),
    payment_method text NOT NULL DEFAULT 'cash'
        CHECK (payment_method IN ('cash', 'check', 'card', 'transfer', 'other')),
    reference_number text,
    notes text,
    created_at timestamptz NOT NULL DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_estimates_created_at ON estimates (created_at DESC);
CREATE INDEX IF NOT EXISTS idx_crm_invoices_created_at ON crm_invoices (created_at DESC);
CREATE INDEX IF NOT EXISTS idx_payments_invoice_id ON payments (invoice_id);
"""
