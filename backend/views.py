"""
Server-rendered page. The inline script keeps the list in step with the JSON
API after the first render.
"""

from html import escape
from typing import Iterable, List

from .config import APP_TITLE
from .schemas import BookmarkRecord
from .security import SessionState
from .utils import domain_name, favicon_url, is_web_url, short_date, pluralize_bookmarks

STYLE = """
:root{
  --bg:#f8fafc; --text:#111827; --muted:#6b7280; --border:#e5e7eb;
  --accent:#4f46e5; --danger:#dc2626; --card:#fff;
}
*{box-sizing:border-box}
body{margin:0;background:var(--bg);color:var(--text);
  font-family: ui-sans-serif, system-ui, -apple-system, Segoe UI, Roboto, "Helvetica Neue", Arial, sans-serif}
.container{max-width:820px;margin:0 auto;padding:24px}
header{display:flex;align-items:center;justify-content:space-between;margin-bottom:24px}
.brand{font-weight:700;font-size:22px;color:var(--accent)}
header .meta{display:flex;align-items:center;gap:8px;color:var(--muted);font-size:14px}
button, input{font:inherit;border:1px solid var(--border);border-radius:10px;padding:8px 12px;background:#fff;color:var(--text)}
button{cursor:pointer}
button.primary, a.primary{background:var(--accent);color:#fff;border-color:var(--accent);text-decoration:none;
  display:inline-block;padding:12px 24px;border-radius:12px;font-weight:600}
button:disabled{opacity:.5;cursor:not-allowed}
.card{background:var(--card);border:1px solid var(--border);border-radius:14px;padding:20px;margin-bottom:24px}
.card h2{margin:0 0 12px 0;font-size:20px}
form label{display:block;font-size:13px;font-weight:600;margin:10px 0 4px}
form input{width:100%}
form button{margin-top:16px;width:100%}
.count{font-size:13px;color:var(--muted)}
.badge{display:inline-block;min-width:22px;padding:2px 6px;border-radius:999px;background:var(--accent);color:#fff;text-align:center;font-size:12px}
ul.bookmarks{list-style:none;margin:0;padding:0}
li.bookmark{display:flex;align-items:center;gap:12px;padding:12px 0;border-top:1px solid var(--border);transition:opacity .2s, transform .2s}
li.bookmark.removing{opacity:0;transform:scale(.95)}
li.bookmark.delete-failed{background:#fef2f2}
.favicon{width:32px;height:32px;flex-shrink:0;border-radius:8px;background:#f3f4f6;display:flex;align-items:center;justify-content:center}
.favicon img{width:24px;height:24px}
.body{flex:1;min-width:0}
.body h3{margin:0;font-size:16px;white-space:nowrap;overflow:hidden;text-overflow:ellipsis}
.sub{font-size:13px;color:var(--muted)}
.sub a{color:var(--muted);text-decoration:none}
.sub a:hover{color:var(--accent)}
button.delete{border:none;color:var(--muted);background:transparent}
button.delete:hover{color:var(--danger)}
.empty{text-align:center;color:var(--muted);padding:32px 0}
.hero{text-align:center;padding:48px 0}
.hero h2{font-size:44px;margin:0 0 12px 0}
.hero p{color:var(--muted);font-size:18px}
.features{display:grid;grid-template-columns:repeat(auto-fit,minmax(200px,1fr));gap:16px;margin:32px 0}
.features .card{margin:0;text-align:left}
footer{text-align:center;color:var(--muted);font-size:12px;margin-top:24px}
"""

SCRIPT = """
(function(){
  const list = document.getElementById('bookmark-list');
  const form = document.getElementById('bookmark-form');
  const logout = document.getElementById('logout');

  if(logout){
    logout.onclick = async ()=>{
      await fetch('/auth/logout',{method:'POST',credentials:'include'});
      location.reload();
    };
  }
  if(!form || !list) return;

  const esc = (s)=>String(s).replace(/[&<>"']/g,(c)=>({'&':'&amp;','<':'&lt;','>':'&gt;','"':'&quot;',"'":'&#x27;'}[c]));
  const host = (u)=>{ try{ return new URL(u).hostname; }catch(e){ return ''; } };

  function refreshCount(){
    const n = list.querySelectorAll('li.bookmark').length;
    document.getElementById('count-n').textContent = n;
    document.getElementById('count-word').textContent = n === 1 ? 'bookmark' : 'bookmarks';
    document.getElementById('empty').style.display = n ? 'none' : 'block';
  }

  function itemHtml(b){
    const h = host(b.url);
    const domain = h ? h.replace(/^www\\./,'') : b.url;
    const icon = h ? `<img src="https://www.google.com/s2/favicons?domain=${encodeURIComponent(h)}&sz=64" alt="">` : '&#127760;';
    const date = new Date(b.created_at).toLocaleDateString('en-US',{month:'short',day:'numeric',timeZone:'UTC'});
    const link = /^https?:\\/\\//i.test(b.url)
      ? `<a href="${esc(b.url)}" target="_blank" rel="noopener noreferrer">${esc(domain)}</a>`
      : `<span class="url">${esc(domain)}</span>`;
    return `<div class="favicon">${icon}</div>
      <div class="body"><h3>${esc(b.title)}</h3>
      <div class="sub">${link} &middot; <time>${date}</time></div></div>
      <button class="delete" data-id="${esc(b.id)}" aria-label="Delete bookmark">&#128465;</button>`;
  }

  async function remove(li){
    const id = li.getAttribute('data-id');
    const btn = li.querySelector('button.delete');
    btn.disabled = true;
    li.classList.remove('delete-failed');
    li.classList.add('removing');
    let ok = false;
    try{
      const r = await fetch(`/api/bookmarks/${encodeURIComponent(id)}`,{method:'DELETE',credentials:'include'});
      ok = r.ok;
      if(!ok) console.error('delete failed', id, r.status);
    }catch(err){
      console.error('delete failed', id, err);
    }
    if(ok){
      setTimeout(()=>{ li.remove(); refreshCount(); }, __REMOVE_MS__);
    }else{
      li.classList.remove('removing');
      li.classList.add('delete-failed');
      btn.disabled = false;
    }
  }

  list.addEventListener('click',(e)=>{
    const btn = e.target.closest('button.delete');
    if(btn) remove(btn.closest('li.bookmark'));
  });

  form.addEventListener('submit', async (e)=>{
    e.preventDefault();
    const title = form.elements['title'].value.trim();
    const url = form.elements['url'].value.trim();
    if(!title || !url) return;
    const submit = form.querySelector('button[type=submit]');
    submit.disabled = true;
    try{
      const r = await fetch('/api/bookmarks',{method:'POST',credentials:'include',
        headers:{'Content-Type':'application/json'},body:JSON.stringify({title,url})});
      if(r.ok){
        const b = await r.json();
        const li = document.createElement('li');
        li.className = 'bookmark';
        li.setAttribute('data-id', b.id);
        li.innerHTML = itemHtml(b);
        list.prepend(li);
        form.reset();
        refreshCount();
      }else{
        console.error('add failed', r.status, await r.text());
      }
    }catch(err){
      console.error(err);
    }finally{
      submit.disabled = false;
    }
  });
})();
"""

# time the removal transition gets before the row leaves the DOM
REMOVE_TRANSITION_MS = 200


def _auth_control(state: SessionState) -> str:
    if state.is_authenticated:
        return (
            f'<span class="email">{escape(state.user.email)}</span>'
            ' <button id="logout">Sign out</button>'
        )
    return '<a class="primary" href="/auth/login">Continue with Google</a>'


def render_bookmark(b: BookmarkRecord) -> str:
    icon = favicon_url(b.url)
    icon_html = f'<img src="{escape(icon)}" alt="">' if icon else "&#127760;"
    label = escape(domain_name(b.url))
    # only http(s) urls become clickable links
    if is_web_url(b.url):
        link = f'<a href="{escape(b.url)}" target="_blank" rel="noopener noreferrer">{label}</a>'
    else:
        link = f'<span class="url">{label}</span>'
    return (
        f'<li class="bookmark" data-id="{escape(b.id)}">'
        f'<div class="favicon">{icon_html}</div>'
        f'<div class="body"><h3>{escape(b.title)}</h3>'
        f'<div class="sub">{link} &middot; '
        f'<time datetime="{b.created_at.isoformat()}">{short_date(b.created_at)}</time></div></div>'
        f'<button class="delete" data-id="{escape(b.id)}" aria-label="Delete bookmark">&#128465;</button>'
        "</li>"
    )


def _landing() -> str:
    features = [
        ("Lightning Fast", "Save a link in a couple of keystrokes and find it again instantly."),
        ("Private &amp; Secure", "Your bookmarks are yours alone. Protected by Google sign-in."),
        ("Simple &amp; Clean", "An interface that stays out of your way. Just works."),
    ]
    cards = "".join(f'<div class="card"><h3>{t}</h3><p class="sub">{d}</p></div>' for t, d in features)
    return (
        '<section class="hero">'
        "<h2>Your Links,<br>Beautifully Organized</h2>"
        "<p>Save and organize your favorite websites.<br>Access them from anywhere, anytime.</p>"
        f'<div class="features">{cards}</div>'
        '<a class="primary" href="/auth/login">Continue with Google</a>'
        '<p class="sub">Sign in with Google to get started.</p>'
        "</section>"
    )


def _workspace(bookmarks: List[BookmarkRecord]) -> str:
    n = len(bookmarks)
    items = "".join(render_bookmark(b) for b in bookmarks)
    return (
        '<form id="bookmark-form" class="card" autocomplete="off">'
        "<h2>Add Bookmark</h2>"
        '<label for="title">Title</label>'
        '<input id="title" name="title" type="text" placeholder="My Awesome Website" required>'
        '<label for="url">URL</label>'
        '<input id="url" name="url" type="url" placeholder="https://example.com" required>'
        '<button type="submit" class="primary">Add Bookmark</button>'
        "</form>"
        '<section class="card">'
        "<h2>My Bookmarks</h2>"
        f'<p class="count"><span id="count-n" class="badge">{n}</span> '
        f'<span id="count-word">{pluralize_bookmarks(n)}</span> saved</p>'
        f'<div id="empty" class="empty" style="display:{"none" if n else "block"}">'
        "<h3>No bookmarks yet</h3><p>Add your first bookmark above to get started!</p></div>"
        f'<ul id="bookmark-list" class="bookmarks">{items}</ul>'
        "</section>"
    )


def render_page(state: SessionState, bookmarks: Iterable[BookmarkRecord] = ()) -> str:
    main = _workspace(list(bookmarks)) if state.is_authenticated else _landing()
    title = escape(APP_TITLE)
    return f"""<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width,initial-scale=1">
<title>{title}</title>
<style>{STYLE}</style>
</head>
<body>
<div class="container">
  <header>
    <div class="brand">{title}</div>
    <div class="meta" id="auth">{_auth_control(state)}</div>
  </header>
  <main>{main}</main>
  <footer>Built with FastAPI and SQLAlchemy</footer>
</div>
<script>{SCRIPT.replace("__REMOVE_MS__", str(REMOVE_TRANSITION_MS))}</script>
</body>
</html>
"""
